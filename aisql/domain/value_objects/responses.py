"""Typed values decoded from AI function responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from aisql.domain.value_objects.enums import SentimentLabel


@dataclass(frozen=True)
class AspectSentiment:
    name: str
    sentiment: SentimentLabel


@dataclass(frozen=True)
class SentimentResult:
    """AI_SENTIMENT output: categories[0] is always the 'overall' entry."""

    categories: tuple[AspectSentiment, ...]

    @property
    def overall(self) -> SentimentLabel:
        for category in self.categories:
            if category.name == "overall":
                return category.sentiment
        return self.categories[0].sentiment if self.categories else SentimentLabel.UNKNOWN

    def for_aspect(self, name: str) -> SentimentLabel | None:
        for category in self.categories:
            if category.name.lower() == name.lower():
                return category.sentiment
        return None


@dataclass(frozen=True)
class Transcription:
    text: str
    audio_duration: float | None = None
    segments: tuple[dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ParsedDocument:
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    pages: tuple[dict[str, Any], ...] = ()

    @property
    def page_count(self) -> int | None:
        count = self.metadata.get("pageCount")
        if count is not None:
            return int(count)
        return len(self.pages) or None
