"""Result endpoints — persisted AI results and their status distribution."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from aisql.adapters.persistence.repositories import SqlResultRepository
from aisql.application.use_cases.enrich_records import status_distribution
from aisql.domain.value_objects.enums import AIFunction, CallStatus
from aisql.infrastructure.api.dependencies import get_result_repo
from aisql.infrastructure.api.schemas import result_to_dict

router = APIRouter(prefix="/results", tags=["results"])


def _parse_function(function: str | None) -> AIFunction | None:
    if function is None:
        return None
    try:
        return AIFunction(function)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown AI function: {function}")


def _parse_status(status: str | None) -> CallStatus | None:
    if status is None:
        return None
    for candidate in CallStatus:
        if candidate.value.lower() == status.lower():
            return candidate
    raise HTTPException(status_code=422, detail=f"Unknown status: {status}")


@router.get("")
async def list_results(
    function: str | None = None,
    status: str | None = None,
    contract: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    repo: SqlResultRepository = Depends(get_result_repo),
):
    """Most recent results first, optionally filtered by function, status and contract."""
    results = await repo.find(
        function=_parse_function(function),
        status=_parse_status(status),
        limit=limit,
        contract=contract,
    )
    return [result_to_dict(r) for r in results]


@router.get("/stats")
async def result_stats(
    function: str | None = None,
    repo: SqlResultRepository = Depends(get_result_repo),
):
    """Count and percentage of stored results per status."""
    counts = await repo.count_by_status(function=_parse_function(function))
    return {
        "function": function,
        "total": sum(counts.values()),
        "status_distribution": status_distribution(counts),
    }


@router.get("/{function}/{record_key}")
async def get_result(
    function: str,
    record_key: str,
    repo: SqlResultRepository = Depends(get_result_repo),
):
    """Latest result of *function* for one record."""
    result = await repo.get_by_record(_parse_function(function), record_key)
    if result is None:
        raise HTTPException(status_code=404, detail="Result not found")
    return result_to_dict(result)
