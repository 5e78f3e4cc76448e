"""SimilarityPolicy — rank, pair and cluster embedding vectors by cosine similarity.

AI_SIMILARITY over two embeddings is their cosine similarity, so once the
vectors are fetched the comparisons run locally instead of one remote call
per pair.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import combinations
from typing import Mapping, Sequence

DUPLICATE_THRESHOLD = 0.8


@dataclass(frozen=True)
class ScoredKey:
    key: str
    score: float


@dataclass(frozen=True)
class SimilarPair:
    first: str
    second: str
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]. A zero vector is similar to nothing (0.0).

    Raises:
        ValueError: if the vectors have different dimensions.
    """
    if len(a) != len(b):
        raise ValueError(f"Vector dimensions differ: {len(a)} != {len(b)}")
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    return max(-1.0, min(1.0, dot / (norm_a * norm_b)))


def rank_by_similarity(
    query: Sequence[float],
    vectors: Mapping[str, Sequence[float]],
    top_k: int = 10,
) -> list[ScoredKey]:
    """The *top_k* keys most similar to *query*, best first. Ties keep key order."""
    scored = [ScoredKey(key, cosine_similarity(query, vec)) for key, vec in vectors.items()]
    scored.sort(key=lambda s: (-s.score, s.key))
    return scored[:top_k]


def similar_pairs(
    vectors: Mapping[str, Sequence[float]],
    threshold: float | None = None,
    limit: int | None = 10,
) -> list[SimilarPair]:
    """Unordered pairs (first < second) by descending similarity."""
    pairs = []
    for a, b in combinations(sorted(vectors), 2):
        score = cosine_similarity(vectors[a], vectors[b])
        if threshold is None or score > threshold:
            pairs.append(SimilarPair(a, b, score))
    pairs.sort(key=lambda p: (-p.score, p.first, p.second))
    return pairs if limit is None else pairs[:limit]


def cluster_similar(
    vectors: Mapping[str, Sequence[float]],
    threshold: float = DUPLICATE_THRESHOLD,
) -> dict[str, list[ScoredKey]]:
    """For every key, the other keys above *threshold*, most similar first.

    Keys with no neighbour above the threshold are left out; the result is
    ordered by cluster size, largest first.
    """
    related: dict[str, list[ScoredKey]] = {}
    for pair in similar_pairs(vectors, threshold=threshold, limit=None):
        related.setdefault(pair.first, []).append(ScoredKey(pair.second, pair.score))
        related.setdefault(pair.second, []).append(ScoredKey(pair.first, pair.score))
    for neighbours in related.values():
        neighbours.sort(key=lambda s: (-s.score, s.key))
    return dict(sorted(related.items(), key=lambda kv: (-len(kv[1]), kv[0])))
