"""Processing endpoints — enrich CSV records, summarize groups, estimate token cost."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from aisql.adapters.csv_loader.loader import load_records, load_source
from aisql.adapters.persistence.repositories import to_json
from aisql.application.use_cases.enrich_records import EnrichRecordsUseCase
from aisql.application.use_cases.estimate_cost import EstimateCostUseCase
from aisql.application.use_cases.summarize_groups import SummarizeGroupsUseCase
from aisql.config import settings
from aisql.domain.errors import InvalidCallError
from aisql.domain.policies.decisions import STATUS_LABELS
from aisql.infrastructure.api.dependencies import (
    default_model_for,
    get_enrich_records_uc,
    get_estimate_cost_uc,
    get_summarize_groups_uc,
    resolve_csv,
)
from aisql.infrastructure.api.schemas import (
    EstimateRequest,
    ProcessRequest,
    SummariesRequest,
    result_to_dict,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/process", tags=["processing"])


@router.post("")
async def process_records(
    request: ProcessRequest,
    enrich_uc: EnrichRecordsUseCase = Depends(get_enrich_records_uc),
):
    """Run one AI function over every record of a CSV file and persist the results."""
    if request.label_kind not in STATUS_LABELS:
        raise HTTPException(status_code=422, detail=f"Unknown label kind: {request.label_kind}")

    path = resolve_csv(request.file_name)
    records = load_records(
        path,
        key_column=request.key_column,
        content_column=request.content_column,
        file_column=request.file_column,
    )
    enrich_uc.label_kind = request.label_kind

    try:
        report = await enrich_uc.execute(
            records,
            request.function,
            model=default_model_for(request.function, request.model),
            options=request.options,
            **request.params,
        )
    except InvalidCallError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "status": "ok",
        "file": path.name,
        "function": request.function,
        "total_processed": report.total,
        "status_distribution": report.status_distribution(),
        "results": [
            {
                "record_key": o.record_key,
                "status": o.status.value,
                "label": o.label,
                "value": to_json(o.value),
                "token_count": o.token_count,
                "error": o.error,
            }
            for o in report.outcomes
        ],
    }


@router.post("/estimate")
async def estimate_cost(
    request: EstimateRequest,
    estimate_uc: EstimateCostUseCase = Depends(get_estimate_cost_uc),
):
    """Count tokens per record and estimate the cost of the whole file."""
    path = resolve_csv(request.file_name)
    records = load_records(path, key_column=request.key_column, content_column=request.content_column)
    texts = {r.key: r.content for r in records if r.content}

    try:
        report = await estimate_uc.execute(
            texts,
            model=request.model or settings.default_token_model,
            function_name=request.function_name,
        )
    except InvalidCallError as e:
        raise HTTPException(status_code=422, detail=str(e))

    estimate = report.estimate
    return {
        "status": "ok",
        "model": report.model,
        "token_counts": report.token_counts,
        "validation": {k: v.value for k, v in report.validation.items()},
        "uncounted": report.uncounted,
        "estimate": {
            "input_tokens": estimate.input_tokens,
            "estimated_output_tokens": estimate.estimated_output_tokens,
            "total_tokens": estimate.total_tokens,
            "input_cost_usd": estimate.input_cost_usd,
            "output_cost_usd": estimate.output_cost_usd,
            "total_cost_usd": estimate.total_cost_usd,
            "guard_overhead_tokens": estimate.guard_overhead_tokens,
        },
    }


@router.post("/summaries")
async def summarize_groups(
    request: SummariesRequest,
    summarize_uc: SummarizeGroupsUseCase = Depends(get_summarize_groups_uc),
):
    """One aggregated summary per user, day or week of records."""
    path = resolve_csv(request.file_name)
    records = load_source(
        path,
        source=request.source,
        key_column=request.key_column,
        content_column=request.content_column,
    )

    try:
        summaries = await summarize_uc.execute(
            records, request.group_by, min_records=request.min_records, limit=request.limit
        )
    except InvalidCallError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "status": "ok",
        "file": path.name,
        "group_by": request.group_by,
        "groups": [
            {
                "group": s.group,
                "record_count": s.record_count,
                "unique_users": s.unique_users,
                **result_to_dict(s.result, "completion"),
            }
            for s in summaries
        ],
    }
