"""SemanticSearchUseCase — embed records once, then search, pair and cluster them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.domain.entities.record import Record
from aisql.domain.errors import ExternalServiceError, InvalidCallError
from aisql.domain.policies.similarity import (
    DUPLICATE_THRESHOLD,
    ScoredKey,
    SimilarPair,
    cluster_similar,
    rank_by_similarity,
    similar_pairs,
)
from aisql.domain.value_objects.enums import AIFunction, CallStatus

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 150


@dataclass
class EmbeddingIndex:
    """Vectors of the records that embedded successfully, plus what did not."""

    model: str
    vectors: dict[str, list[float]] = field(default_factory=dict)
    previews: dict[str, str | None] = field(default_factory=dict)
    not_embedded: dict[str, CallStatus] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.vectors)


@dataclass(frozen=True)
class SearchMatch:
    record_key: str
    score: float
    preview: str | None = None


def _preview(record: Record) -> str | None:
    if record.content:
        return record.content[:PREVIEW_CHARS]
    if record.file is not None:
        return str(record.file)
    return None


class SemanticSearchUseCase:
    def __init__(self, invoker: InvokeAIFunctionUseCase, model: str):
        if not model:
            raise InvalidCallError("semantic search requires an embedding model")
        self._invoker = invoker
        self._model = model

    async def build_index(self, records: list[Record]) -> EmbeddingIndex:
        """Embed every record (text or staged file) with the configured model."""
        index = EmbeddingIndex(model=self._model)
        for record in records:
            if not record.has_input():
                index.not_embedded[record.key] = CallStatus.SKIPPED
                continue
            try:
                result = await self._invoker.invoke(AIFunction.EMBED, record.payload, model=self._model)
            except InvalidCallError as e:
                logger.warning("Record %s cannot be embedded: %s", record.key, e)
                index.not_embedded[record.key] = CallStatus.INVALID
                continue
            if result.ok:
                index.vectors[record.key] = result.value
                index.previews[record.key] = _preview(record)
            else:
                index.not_embedded[record.key] = result.status

        if index.not_embedded:
            logger.warning("%d of %d records not embedded", len(index.not_embedded), len(records))
        logger.info("Embedded %d records with %s", len(index), self._model)
        return index

    async def search(self, index: EmbeddingIndex, query: str, top_k: int = 10) -> list[SearchMatch]:
        """Records most similar to *query*, best first.

        Raises:
            InvalidCallError: empty query or non-positive top_k.
            ExternalServiceError: the query itself could not be embedded.
        """
        if not query or not query.strip():
            raise InvalidCallError("search query must not be empty")
        if top_k < 1:
            raise InvalidCallError("top_k must be at least 1")

        result = await self._invoker.invoke(AIFunction.EMBED, query, model=self._model)
        if not result.ok:
            if isinstance(result.error, ExternalServiceError):
                raise result.error
            raise ExternalServiceError(f"query embedding came back {result.status.value}")

        return [self._match(index, s) for s in rank_by_similarity(result.value, index.vectors, top_k)]

    def duplicates(
        self, index: EmbeddingIndex, threshold: float | None = None, limit: int | None = 10
    ) -> list[SimilarPair]:
        """Most similar record pairs, optionally only those above *threshold*."""
        return similar_pairs(index.vectors, threshold=threshold, limit=limit)

    def clusters(
        self, index: EmbeddingIndex, threshold: float = DUPLICATE_THRESHOLD
    ) -> dict[str, list[SearchMatch]]:
        """Related records per record above *threshold*, largest groups first."""
        return {
            key: [self._match(index, s) for s in related]
            for key, related in cluster_similar(index.vectors, threshold).items()
        }

    @staticmethod
    def _match(index: EmbeddingIndex, scored: ScoredKey) -> SearchMatch:
        return SearchMatch(
            record_key=scored.key, score=round(scored.score, 6), preview=index.previews.get(scored.key)
        )
