"""Search endpoints — semantic search, duplicate pairs and clusters over a CSV table."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from aisql.adapters.csv_loader.loader import load_source
from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.application.use_cases.semantic_search import (
    EmbeddingIndex,
    SearchMatch,
    SemanticSearchUseCase,
)
from aisql.config import settings
from aisql.domain.errors import ExternalServiceError, InvalidCallError
from aisql.infrastructure.api.dependencies import get_invoker, resolve_csv
from aisql.infrastructure.api.schemas import (
    ClustersRequest,
    DuplicatesRequest,
    SearchRequest,
    SourceRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


async def _index(
    request: SourceRequest, invoker: InvokeAIFunctionUseCase
) -> tuple[SemanticSearchUseCase, EmbeddingIndex]:
    path = resolve_csv(request.file_name)
    records = load_source(
        path,
        source=request.source,
        key_column=request.key_column,
        content_column=request.content_column,
        file_column=request.file_column,
    )
    uc = SemanticSearchUseCase(invoker, model=request.model or settings.default_embed_model)
    return uc, await uc.build_index(records)


def _index_summary(index: EmbeddingIndex) -> dict:
    return {
        "model": index.model,
        "embedded": len(index),
        "not_embedded": {k: v.value for k, v in index.not_embedded.items()},
    }


def _match_dict(match: SearchMatch) -> dict:
    return {"record_key": match.record_key, "score": match.score, "preview": match.preview}


@router.post("")
async def search(
    request: SearchRequest,
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
):
    """Records most similar to the query text, best first."""
    uc, index = await _index(request, invoker)
    try:
        matches = await uc.search(index, request.query, top_k=request.top_k)
    except InvalidCallError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ExternalServiceError as e:
        logger.error("Query embedding failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))

    return {**_index_summary(index), "query": request.query, "matches": [_match_dict(m) for m in matches]}


@router.post("/duplicates")
async def duplicates(
    request: DuplicatesRequest,
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
):
    """Most similar record pairs, e.g. duplicate tickets."""
    uc, index = await _index(request, invoker)
    pairs = uc.duplicates(index, threshold=request.threshold, limit=request.limit)
    return {
        **_index_summary(index),
        "pairs": [
            {"first": p.first, "second": p.second, "score": round(p.score, 6)} for p in pairs
        ],
    }


@router.post("/clusters")
async def clusters(
    request: ClustersRequest,
    invoker: InvokeAIFunctionUseCase = Depends(get_invoker),
):
    """Related records per record above the similarity threshold."""
    uc, index = await _index(request, invoker)
    grouped = uc.clusters(index, threshold=request.threshold)
    return {
        **_index_summary(index),
        "threshold": request.threshold,
        "clusters": [
            {
                "record_key": key,
                "similar_count": len(related),
                "related": [_match_dict(m) for m in related],
            }
            for key, related in grouped.items()
        ],
    }
