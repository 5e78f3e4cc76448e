"""CallOptions — the options object passed to AI_COMPLETE / AI_PARSE_DOCUMENT."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from aisql.domain.errors import InvalidCallError
from aisql.domain.value_objects.enums import AIFunction, ParseMode

# Which option keys each function accepts. Everything else takes no options.
ALLOWED_OPTIONS: dict[AIFunction, frozenset[str]] = {
    AIFunction.COMPLETE: frozenset({"temperature", "top_p", "max_tokens", "guard_enable"}),
    AIFunction.PARSE_DOCUMENT: frozenset({"mode", "page_split"}),
}

MAX_TOKENS_LIMIT = 8192


@dataclass(frozen=True)
class CallOptions:
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    guard_enable: bool | None = None
    mode: ParseMode | None = None
    page_split: bool | None = None

    @classmethod
    def from_mapping(cls, function: AIFunction, options: Mapping[str, Any] | None) -> "CallOptions":
        """Build and validate options for *function*.

        Raises:
            InvalidCallError: unknown key, key not accepted by the function,
                or a value out of range.
        """
        if not options:
            return cls()

        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise InvalidCallError(f"Unknown option(s): {sorted(unknown)}")

        allowed = ALLOWED_OPTIONS.get(function, frozenset())
        not_allowed = set(options) - allowed
        if not_allowed:
            raise InvalidCallError(
                f"Option(s) {sorted(not_allowed)} are not accepted by {function.value}"
            )

        values = dict(options)
        if "mode" in values and values["mode"] is not None:
            try:
                values["mode"] = ParseMode(str(values["mode"]).upper())
            except ValueError:
                raise InvalidCallError(f"Unknown parse mode: {options['mode']!r}") from None

        opts = cls(**values)
        opts._check_ranges()
        return opts

    def _check_ranges(self) -> None:
        for name in ("temperature", "top_p"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCallError(f"{name} must be a number, got {value!r}")
            if not 0 <= value <= 1:
                raise InvalidCallError(f"{name} must be between 0 and 1, got {value}")
        if self.max_tokens is not None and (
            isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int)
        ):
            raise InvalidCallError(f"max_tokens must be an integer, got {self.max_tokens!r}")
        if self.max_tokens is not None and not 1 <= self.max_tokens <= MAX_TOKENS_LIMIT:
            raise InvalidCallError(
                f"max_tokens must be between 1 and {MAX_TOKENS_LIMIT}, got {self.max_tokens}"
            )
        for name in ("guard_enable", "page_split"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, bool):
                raise InvalidCallError(f"{name} must be a boolean, got {value!r}")

    def as_dict(self) -> dict[str, Any]:
        """Only the options that were actually set, in declaration order."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[f.name] = value.value if isinstance(value, ParseMode) else value
        return out

    @property
    def guarded(self) -> bool:
        return bool(self.guard_enable)

    def __bool__(self) -> bool:
        return bool(self.as_dict())
