"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from pathlib import Path

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from aisql.adapters.persistence.database import get_session
from aisql.adapters.persistence.repositories import SqlResultRepository
from aisql.adapters.snowflake.cortex_adapter import SnowflakeCortexAdapter
from aisql.application.ports.cortex_port import CortexPort
from aisql.application.use_cases.enrich_records import EnrichRecordsUseCase
from aisql.application.use_cases.estimate_cost import EstimateCostUseCase
from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.application.use_cases.summarize_groups import SummarizeGroupsUseCase
from aisql.config import settings

# Re-export session dependency
get_db_session = get_session

# Singletons: the adapter holds one lazily opened connection, the invoker
# holds the result cache shared across requests.
_cortex_adapter = SnowflakeCortexAdapter()
_invoker = InvokeAIFunctionUseCase(
    cortex=_cortex_adapter,
    sentiment_contract=settings.sentiment_contract,
    use_cache=settings.cache_results,
    cache_max_entries=settings.cache_max_entries,
    cache_ttl_seconds=settings.cache_ttl_seconds,
)


def get_cortex() -> CortexPort:
    return _cortex_adapter


def get_invoker() -> InvokeAIFunctionUseCase:
    return _invoker


def get_result_repo(session: AsyncSession = Depends(get_session)) -> SqlResultRepository:
    return SqlResultRepository(session)


def get_enrich_records_uc(
    session: AsyncSession = Depends(get_session),
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
) -> EnrichRecordsUseCase:
    return EnrichRecordsUseCase(
        invoker=invoker,
        result_repo=SqlResultRepository(session),
        max_input_tokens=settings.max_input_tokens,
        token_model=settings.default_token_model,
    )


def get_estimate_cost_uc(
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
) -> EstimateCostUseCase:
    return EstimateCostUseCase(invoker=invoker)


def default_model_for(function: str, model: str | None) -> str | None:
    """Fill in the configured model for functions that need one."""
    if model:
        return model
    if function == "complete":
        return settings.default_complete_model
    if function == "embed":
        return settings.default_embed_model
    return None


def get_summarize_groups_uc(
    session: AsyncSession = Depends(get_session),
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
) -> SummarizeGroupsUseCase:
    return SummarizeGroupsUseCase(invoker=invoker, result_repo=SqlResultRepository(session))


def resolve_csv(file_name: str) -> Path:
    """Path of *file_name* inside the data directory. 400 if it does not exist."""
    # Only files directly inside the data directory
    path = Path(settings.csv_data_path) / Path(file_name).name
    if not path.is_file():
        raise HTTPException(status_code=400, detail=f"CSV file not found: {path}")
    return path
