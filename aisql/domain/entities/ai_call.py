"""AICall — one request to an external AI function."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from aisql.domain.errors import InvalidCallError
from aisql.domain.value_objects.call_options import CallOptions
from aisql.domain.value_objects.enums import AIFunction
from aisql.domain.value_objects.file_ref import FileRef

Payload = Any  # str | FileRef | list[str] | tuple[str | FileRef, str | FileRef]


@dataclass(frozen=True)
class AICall:
    function: AIFunction
    payload: Payload
    model: str | None = None
    options: CallOptions = field(default_factory=CallOptions)
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        function: AIFunction | str,
        payload: Payload,
        model: str | None = None,
        options: Mapping[str, Any] | None = None,
        **params: Any,
    ) -> "AICall":
        """Create a validated call.

        Raises:
            InvalidCallError: if the function name, payload, model or
                options do not fit together.
        """
        try:
            function = AIFunction(function)
        except ValueError:
            raise InvalidCallError(f"Unknown AI function: {function!r}") from None

        call = cls(
            function=function,
            payload=payload,
            model=model,
            options=CallOptions.from_mapping(function, options),
            params=dict(params),
        )
        call.validate()
        return call

    def validate(self) -> None:
        if self.function.requires_model and not self.model:
            raise InvalidCallError(f"{self.function.value} requires a model")

        check = _PAYLOAD_CHECKS.get(self.function, _check_text_or_file)
        check(self)
        validate_params(self.function, self.params)

    def cache_key(self) -> str:
        """Stable key covering function, model, payload, options and params."""
        return json.dumps(
            {
                "function": self.function.value,
                "model": self.model,
                "payload": _jsonable(self.payload),
                "options": self.options.as_dict(),
                "params": _jsonable(self.params),
            },
            sort_keys=True,
            ensure_ascii=False,
        )


def _jsonable(value: Any) -> Any:
    if isinstance(value, FileRef):
        return {"file": str(value)}
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


# ─── Payload checks ─────────────────────────────────────────────────


def _check_text(call: AICall) -> None:
    if not isinstance(call.payload, str):
        raise InvalidCallError(f"{call.function.value} expects text input")


def _check_text_or_file(call: AICall) -> None:
    if not isinstance(call.payload, (str, FileRef)):
        raise InvalidCallError(f"{call.function.value} expects text or a staged file")


def _check_file(call: AICall) -> None:
    if not isinstance(call.payload, FileRef):
        raise InvalidCallError(f"{call.function.value} expects a staged file")


def _check_text_list(call: AICall) -> None:
    if not isinstance(call.payload, (list, tuple)) or not call.payload:
        raise InvalidCallError(f"{call.function.value} expects a non-empty list of texts")
    if not all(isinstance(item, str) for item in call.payload):
        raise InvalidCallError(f"{call.function.value} expects a list of texts")


def _check_pair(call: AICall) -> None:
    if not isinstance(call.payload, (list, tuple)) or len(call.payload) != 2:
        raise InvalidCallError("similarity expects exactly two inputs")
    first, second = call.payload
    both_text = isinstance(first, str) and isinstance(second, str)
    both_files = isinstance(first, FileRef) and isinstance(second, FileRef)
    if not (both_text or both_files):
        raise InvalidCallError("similarity expects two texts or two staged files")


def _check_complete(call: AICall) -> None:
    _check_text_or_file(call)
    if isinstance(call.payload, FileRef) and "{0}" not in (call.params.get("prompt") or ""):
        raise InvalidCallError("complete on a file needs a 'prompt' containing '{0}'")


def _check_filter(call: AICall) -> None:
    _check_text_or_file(call)
    if isinstance(call.payload, FileRef) and not call.params.get("prompt"):
        raise InvalidCallError("filter on a file needs a 'prompt' predicate")


_PAYLOAD_CHECKS = {
    AIFunction.SENTIMENT: _check_text,
    AIFunction.EXTRACT: _check_text_or_file,
    AIFunction.TRANSLATE: _check_text,
    AIFunction.SUMMARIZE: _check_text,
    AIFunction.SUMMARIZE_AGG: _check_text_list,
    AIFunction.PARSE_DOCUMENT: _check_file,
    AIFunction.TRANSCRIBE: _check_file,
    AIFunction.COMPLETE: _check_complete,
    AIFunction.COUNT_TOKENS: _check_text,
    AIFunction.CLASSIFY: _check_text_or_file,
    AIFunction.FILTER: _check_filter,
    AIFunction.AGG: _check_text_list,
    AIFunction.SIMILARITY: _check_pair,
}

_REQUIRED_PARAMS: dict[AIFunction, tuple[str, ...]] = {
    AIFunction.TRANSLATE: ("target_language",),
    AIFunction.CLASSIFY: ("categories",),
    AIFunction.AGG: ("instruction",),
}


def validate_params(function: AIFunction, params: Mapping[str, Any]) -> None:
    """Check the function arguments that do not depend on the input.

    Raises:
        InvalidCallError: a required argument is missing or has the wrong shape.
    """
    for name in _REQUIRED_PARAMS.get(function, ()):
        if params.get(name) in (None, "", [], {}):
            raise InvalidCallError(f"{function.value} requires '{name}'")

    if function == AIFunction.EXTRACT and not isinstance(
        params.get("response_format"), (Mapping, list, tuple)
    ):
        raise InvalidCallError("extract needs response_format as an object, an array or a JSON schema")
