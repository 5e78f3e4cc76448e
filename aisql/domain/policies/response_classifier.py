"""ResponseClassifier — turns a raw AI function result into a classified AIResult.

The raw result is inspected exactly once. Null (or the Cortex Guard sentinel)
means the output was suppressed, a well-formed value means success, and a
value that does not match the pinned contract is reported as Invalid instead
of silently passed through.
"""

from __future__ import annotations

import json
import math
from functools import partial
from typing import Any, Callable, Mapping

from aisql.domain.entities.ai_call import AICall
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.errors import UnexpectedResponseError
from aisql.domain.value_objects.enums import AIFunction, SentimentContract, SentimentLabel
from aisql.domain.value_objects.responses import (
    AspectSentiment,
    ParsedDocument,
    SentimentResult,
    Transcription,
)

GUARD_FILTERED_MESSAGE = "Response filtered by Cortex Guard"


def classify_response(
    call: AICall,
    raw: Any,
    sentiment_contract: SentimentContract = SentimentContract.CATEGORICAL,
) -> AIResult:
    """Classify *raw* (already fetched) for *call*.

    Returns:
        AIResult with status Success, Filtered or Invalid. Errors raised by
        the remote call itself never reach this function.
    """
    function = call.function

    if raw is None:
        # Without the guard the service gives no way to tell a suppressed
        # output from a swallowed failure.
        return AIResult.filtered(function, model=call.model, ambiguous=not call.options.guarded)

    if function == AIFunction.COMPLETE and _is_guard_message(raw):
        return AIResult.filtered(function, raw=raw, model=call.model)

    if function == AIFunction.SENTIMENT:
        decoder = partial(_decode_sentiment, contract=sentiment_contract)
    else:
        decoder = _DECODERS[function]

    try:
        value = decoder(raw)
    except UnexpectedResponseError as e:
        result = AIResult.invalid(function, error=e, raw=raw, model=call.model)
    else:
        result = AIResult.success(function, value=value, raw=raw, model=call.model)

    if function == AIFunction.SENTIMENT:
        result.contract = SentimentContract(sentiment_contract).value
    return result


# ─── Helpers ────────────────────────────────────────────────────────


def _is_guard_message(raw: Any) -> bool:
    text = _completion_text(raw) if isinstance(raw, (Mapping, str)) else None
    return isinstance(text, str) and text.strip() == GUARD_FILTERED_MESSAGE


def _as_object(raw: Any, function: str) -> Any:
    """VARIANT values may arrive as JSON text."""
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise UnexpectedResponseError(f"{function}: expected JSON, got text", raw) from None
    return raw


def _as_mapping(raw: Any, function: str) -> Mapping[str, Any]:
    value = _as_object(raw, function)
    if not isinstance(value, Mapping):
        raise UnexpectedResponseError(
            f"{function}: expected an object, got {type(value).__name__}", raw
        )
    return value


def _as_number(raw: Any, function: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise UnexpectedResponseError(f"{function}: expected a number", raw)
    try:
        value = float(raw)
    except ValueError:
        raise UnexpectedResponseError(f"{function}: expected a number", raw) from None
    if math.isnan(value):
        raise UnexpectedResponseError(f"{function}: got NaN", raw)
    return value


def _as_unit_score(raw: Any, function: str) -> float:
    value = _as_number(raw, function)
    if not -1.0 <= value <= 1.0:
        raise UnexpectedResponseError(f"{function}: score {value} outside [-1, 1]", raw)
    return value


# ─── Decoders ───────────────────────────────────────────────────────


def _completion_text(raw: Any) -> str | None:
    if isinstance(raw, str):
        return raw
    # Options form: {"choices": [{"messages": "..."}], "usage": {...}}
    choices = raw.get("choices") if isinstance(raw, Mapping) else None
    if choices and isinstance(choices[0], Mapping):
        message = choices[0].get("messages", choices[0].get("message"))
        if isinstance(message, str):
            return message
    return None


def _decode_completion(raw: Any) -> str:
    text = _completion_text(raw)
    if text is None:
        raise UnexpectedResponseError("complete: no text in response", raw)
    return text


def _decode_sentiment(raw: Any, contract: SentimentContract) -> SentimentResult | float:
    if contract == SentimentContract.SCORE:
        return _as_unit_score(raw, "sentiment")

    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        raise UnexpectedResponseError(
            "sentiment: got a numeric score but the categorical contract is pinned", raw
        )
    obj = _as_mapping(raw, "sentiment")
    categories = obj.get("categories")
    if not isinstance(categories, list) or not categories:
        raise UnexpectedResponseError("sentiment: missing 'categories'", raw)

    parsed = []
    for entry in categories:
        if not isinstance(entry, Mapping) or "sentiment" not in entry:
            raise UnexpectedResponseError("sentiment: malformed category entry", raw)
        try:
            label = SentimentLabel(str(entry["sentiment"]).lower())
        except ValueError:
            raise UnexpectedResponseError(
                f"sentiment: unknown label {entry['sentiment']!r}", raw
            ) from None
        parsed.append(AspectSentiment(name=str(entry.get("name", "overall")), sentiment=label))
    return SentimentResult(categories=tuple(parsed))


def _decode_extract(raw: Any) -> Any:
    obj = _as_mapping(raw, "extract")
    if obj.get("error"):
        raise UnexpectedResponseError(f"extract: service reported {obj['error']!r}", raw)
    if "response" in obj:
        return obj["response"]
    return dict(obj)


def _decode_embedding(raw: Any) -> list[float]:
    value = _as_object(raw, "embed")
    if not isinstance(value, (list, tuple)) or not value:
        raise UnexpectedResponseError("embed: expected a non-empty vector", raw)
    try:
        return [float(x) for x in value]
    except (TypeError, ValueError):
        raise UnexpectedResponseError("embed: vector contains non-numeric values", raw) from None


def _decode_text(raw: Any) -> str:
    if not isinstance(raw, str):
        raise UnexpectedResponseError(f"expected text, got {type(raw).__name__}", raw)
    return raw


def _decode_document(raw: Any) -> ParsedDocument:
    obj = _as_mapping(raw, "parse_document")
    if obj.get("errorInformation"):
        raise UnexpectedResponseError(
            f"parse_document: service reported {obj['errorInformation']!r}", raw
        )
    pages = obj.get("pages") or []
    content = obj.get("content")
    if content is None and pages:
        content = "\n\n".join(str(p.get("content", "")) for p in pages if isinstance(p, Mapping))
    if not isinstance(content, str):
        raise UnexpectedResponseError("parse_document: missing 'content'", raw)
    return ParsedDocument(
        content=content,
        metadata=dict(obj.get("metadata") or {}),
        pages=tuple(p for p in pages if isinstance(p, Mapping)),
    )


def _decode_transcription(raw: Any) -> Transcription:
    obj = _as_mapping(raw, "transcribe")
    text = obj.get("text")
    if not isinstance(text, str):
        raise UnexpectedResponseError("transcribe: missing 'text'", raw)
    duration = obj.get("audio_duration")
    segments = obj.get("segments") or obj.get("timestamps") or []
    return Transcription(
        text=text,
        audio_duration=float(duration) if duration is not None else None,
        segments=tuple(s for s in segments if isinstance(s, Mapping)),
    )


def _decode_token_count(raw: Any) -> int:
    value = _as_number(raw, "count_tokens")
    if value < 0 or value != int(value):
        raise UnexpectedResponseError(f"count_tokens: invalid count {raw!r}", raw)
    return int(value)


def _decode_labels(raw: Any) -> list[str]:
    obj = _as_mapping(raw, "classify")
    labels = obj.get("labels")
    if not isinstance(labels, list):
        raise UnexpectedResponseError("classify: missing 'labels'", raw)
    return [str(label) for label in labels]


def _decode_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise UnexpectedResponseError("filter: expected a boolean", raw)


_DECODERS: dict[AIFunction, Callable[[Any], Any]] = {
    AIFunction.EXTRACT: _decode_extract,
    AIFunction.EMBED: _decode_embedding,
    AIFunction.SIMILARITY: lambda raw: _as_unit_score(raw, "similarity"),
    AIFunction.TRANSLATE: _decode_text,
    AIFunction.SUMMARIZE: _decode_text,
    AIFunction.SUMMARIZE_AGG: _decode_text,
    AIFunction.PARSE_DOCUMENT: _decode_document,
    AIFunction.TRANSCRIBE: _decode_transcription,
    AIFunction.COMPLETE: _decode_completion,
    AIFunction.COUNT_TOKENS: _decode_token_count,
    AIFunction.CLASSIFY: _decode_labels,
    AIFunction.FILTER: _decode_bool,
    AIFunction.AGG: _decode_text,
}
