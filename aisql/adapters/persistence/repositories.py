"""SQLAlchemy repository implementations."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Mapping

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aisql.adapters.persistence.models import AIResultModel
from aisql.application.ports.result_repo import ResultRepository
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.errors import AISQLError, ExternalServiceError, UnexpectedResponseError
from aisql.domain.value_objects.enums import AIFunction, CallStatus
from aisql.domain.value_objects.file_ref import FileRef

# ─── Mappers ─────────────────────────────────────────────────────────


def to_json(value: Any) -> Any:
    """Convert a decoded AI value (dataclasses, enums, file refs) to plain JSON."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, FileRef):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Mapping):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def _error_text(result: AIResult) -> str | None:
    if result.status == CallStatus.SKIPPED:
        return str(result.raw) if result.raw else None
    return str(result.error) if result.error is not None else None


def _error_from_text(status: CallStatus, text: str | None) -> AISQLError | None:
    if not text:
        return None
    if status == CallStatus.ERROR:
        return ExternalServiceError(text)
    if status == CallStatus.INVALID:
        return UnexpectedResponseError(text)
    return None


def _result_to_domain(m: AIResultModel) -> AIResult:
    status = CallStatus(m.status)
    return AIResult(
        id=m.id,
        function=AIFunction(m.function),
        status=status,
        value=m.value,
        raw=m.error if status == CallStatus.SKIPPED else None,
        model=m.model,
        error=_error_from_text(status, m.error),
        ambiguous=m.ambiguous,
        contract=m.contract,
        record_key=m.record_key,
        created_at=m.created_at,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlResultRepository(ResultRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, result: AIResult) -> AIResult:
        m = AIResultModel(
            record_key=result.record_key,
            function=result.function.value,
            model=result.model,
            status=result.status.value,
            value=to_json(result.value),
            error=_error_text(result),
            ambiguous=result.ambiguous,
            contract=result.contract,
            created_at=result.created_at,
        )
        self._s.add(m)
        await self._s.flush()
        result.id = m.id
        return result

    async def get_by_record(self, function: AIFunction, record_key: str) -> AIResult | None:
        result = await self._s.execute(
            select(AIResultModel)
            .where(
                AIResultModel.function == function.value,
                AIResultModel.record_key == record_key,
            )
            .order_by(AIResultModel.id.desc())
            .limit(1)
        )
        m = result.scalar_one_or_none()
        return _result_to_domain(m) if m else None

    async def find(
        self,
        function: AIFunction | None = None,
        status: CallStatus | None = None,
        limit: int = 100,
        contract: str | None = None,
    ) -> list[AIResult]:
        query = select(AIResultModel)
        if contract is not None:
            query = query.where(AIResultModel.contract == contract)
        if function is not None:
            query = query.where(AIResultModel.function == function.value)
        if status is not None:
            query = query.where(AIResultModel.status == status.value)
        result = await self._s.execute(query.order_by(AIResultModel.id.desc()).limit(limit))
        return [_result_to_domain(m) for m in result.scalars()]

    async def count_by_status(self, function: AIFunction | None = None) -> dict[CallStatus, int]:
        query = select(AIResultModel.status, func.count(AIResultModel.id)).group_by(
            AIResultModel.status
        )
        if function is not None:
            query = query.where(AIResultModel.function == function.value)
        result = await self._s.execute(query)
        return {CallStatus(status): count for status, count in result.all()}
