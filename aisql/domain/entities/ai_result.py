"""AI result — one classified outcome of an external AI function call."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from aisql.domain.errors import AISQLError, ExternalServiceError
from aisql.domain.value_objects.enums import AIFunction, CallStatus


@dataclass
class AIResult:
    """Classified outcome of one call.

    ``value`` is the typed view of a Success: sentiment objects become
    ``SentimentResult``, extraction is unwrapped from its ``response`` key,
    document and transcription objects become value objects. The other
    functions decode to a plain value (text, number, vector, label list).
    ``raw`` always keeps what the service returned. ``contract`` names the
    response contract the value was read under (sentiment only).
    """

    function: AIFunction
    status: CallStatus
    value: Any = None
    raw: Any = None
    model: str | None = None
    error: AISQLError | None = None
    ambiguous: bool = False
    contract: str | None = None
    record_key: str | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def success(cls, function: AIFunction, value: Any, raw: Any = None, model: str | None = None) -> "AIResult":
        return cls(function=function, status=CallStatus.SUCCESS, value=value, raw=raw, model=model)

    @classmethod
    def filtered(
        cls, function: AIFunction, raw: Any = None, model: str | None = None, ambiguous: bool = False
    ) -> "AIResult":
        return cls(
            function=function, status=CallStatus.FILTERED, raw=raw, model=model, ambiguous=ambiguous
        )

    @classmethod
    def failed(cls, function: AIFunction, error: ExternalServiceError, model: str | None = None) -> "AIResult":
        return cls(function=function, status=CallStatus.ERROR, error=error, model=model)

    @classmethod
    def invalid(cls, function: AIFunction, error: AISQLError, raw: Any = None, model: str | None = None) -> "AIResult":
        return cls(function=function, status=CallStatus.INVALID, error=error, raw=raw, model=model)

    @classmethod
    def skipped(cls, function: AIFunction, reason: str, model: str | None = None) -> "AIResult":
        return cls(function=function, status=CallStatus.SKIPPED, raw=reason, model=model)

    @property
    def ok(self) -> bool:
        return self.status == CallStatus.SUCCESS

    def unwrap(self) -> Any:
        """Return the value, raising the carried error for Error/Invalid results."""
        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, fallback: Any) -> Any:
        return self.value if self.ok else fallback
