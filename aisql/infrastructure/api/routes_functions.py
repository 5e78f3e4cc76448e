"""Function endpoints — invoke one AI function and return the classified result."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from aisql.adapters.persistence.database import get_session
from aisql.adapters.persistence.repositories import SqlResultRepository
from aisql.application.use_cases.draft_reply import DraftReplyUseCase
from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.domain.entities.record import Record
from aisql.domain.errors import InvalidCallError
from aisql.domain.policies.decisions import STATUS_LABELS
from aisql.infrastructure.api.dependencies import default_model_for, get_invoker
from aisql.infrastructure.api.schemas import InvokeRequest, result_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])


@router.post("/reply")
async def draft_reply(
    request: InvokeRequest,
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
):
    """Guarded reply to a customer email plus the send/review decision."""
    if not isinstance(request.text, str):
        raise HTTPException(status_code=422, detail="reply expects 'text' with the email body")

    record = Record(key=request.record_key or "adhoc", content=request.text)
    try:
        reply = await DraftReplyUseCase(invoker).execute(
            record, model=default_model_for("complete", request.model)
        )
    except InvalidCallError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "record_key": reply.record_key,
        "response": reply.response,
        "response_status": reply.response_status,
        "guard_status": reply.guard_status,
        "sentiment": reply.sentiment.value,
        "action": reply.action.value,
    }


@router.post("/{function}")
async def invoke_function(
    function: str,
    request: InvokeRequest,
    persist: bool = False,
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
    session: AsyncSession = Depends(get_session),
):
    """Invoke *function* once. Malformed calls are rejected with 422."""
    if request.label_kind not in STATUS_LABELS:
        raise HTTPException(status_code=422, detail=f"Unknown label kind: {request.label_kind}")

    try:
        result = await invoker.invoke(
            function,
            request.payload(),
            model=default_model_for(function, request.model),
            options=request.options,
            **request.params,
        )
    except (InvalidCallError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    if persist:
        result.record_key = request.record_key
        await SqlResultRepository(session).save(result)

    return result_to_dict(result, request.label_kind)
