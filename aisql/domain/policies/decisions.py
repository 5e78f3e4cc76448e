"""Deterministic labels and fallbacks derived from classified AI results."""

from __future__ import annotations

from aisql.domain.entities.ai_result import AIResult
from aisql.domain.value_objects.enums import (
    CallStatus,
    ResponseAction,
    SentimentLabel,
)
from aisql.domain.value_objects.responses import SentimentResult

POSITIVE_THRESHOLD = 0.3
NEGATIVE_THRESHOLD = -0.3

FILTERED_FALLBACK_RESPONSE = (
    "Thank you for your message. A customer service representative will "
    "review your inquiry and respond shortly."
)

# (status label when the result is usable, status label otherwise)
STATUS_LABELS: dict[str, tuple[str, str]] = {
    "guard": ("Passed Guard", "Filtered by Guard"),
    "response": ("Response approved", "Response filtered"),
    "moderation": ("Content approved", "Content flagged"),
    "summary": ("Summary generated", "Summary filtered"),
    "automation": ("Can be sent automatically", "Requires manual review"),
    "completion": ("Success", "Failed"),
}

SKIP_TOO_LONG = "too long"
SKIP_EMPTY_INPUT = "empty input"

SKIPPED_LABELS = {
    SKIP_TOO_LONG: "Skipped - Too Long",
    SKIP_EMPTY_INPUT: "Skipped - Empty Input",
}


def label_for_score(score: float) -> SentimentLabel:
    """Map a legacy numeric sentiment score in [-1, 1] to a label."""
    if score > POSITIVE_THRESHOLD:
        return SentimentLabel.POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def overall_sentiment(result: AIResult) -> SentimentLabel:
    """Overall label of a sentiment result under either contract."""
    if not result.ok:
        return SentimentLabel.UNKNOWN
    if isinstance(result.value, SentimentResult):
        return result.value.overall
    return label_for_score(float(result.value))


def status_label(result: AIResult, kind: str = "completion") -> str:
    if result.status == CallStatus.SKIPPED:
        return SKIPPED_LABELS.get(result.raw, "Skipped")
    usable, unusable = STATUS_LABELS[kind]
    return usable if result.ok else unusable


def response_with_fallback(result: AIResult, fallback: str = FILTERED_FALLBACK_RESPONSE) -> str:
    """The completion text, or *fallback* when it was filtered or failed."""
    return result.value_or(fallback)


def decide_response_action(response: AIResult, sentiment: AIResult) -> ResponseAction:
    """Route a generated reply: manual review, supervisor escalation or send."""
    if not response.ok:
        return ResponseAction.MANUAL_REVIEW_REQUIRED
    if overall_sentiment(sentiment) == SentimentLabel.NEGATIVE:
        return ResponseAction.ESCALATE_TO_SUPERVISOR
    return ResponseAction.APPROVED_FOR_SENDING
