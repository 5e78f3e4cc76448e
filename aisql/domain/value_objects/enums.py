"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class AIFunction(str, Enum):
    SENTIMENT = "sentiment"
    EXTRACT = "extract"
    EMBED = "embed"
    SIMILARITY = "similarity"
    TRANSLATE = "translate"
    SUMMARIZE = "summarize"
    SUMMARIZE_AGG = "summarize_agg"
    PARSE_DOCUMENT = "parse_document"
    TRANSCRIBE = "transcribe"
    COMPLETE = "complete"
    COUNT_TOKENS = "count_tokens"
    CLASSIFY = "classify"
    FILTER = "filter"
    AGG = "agg"

    @property
    def sql_name(self) -> str:
        return SQL_NAMES[self]

    @property
    def token_function_name(self) -> str:
        """Name AI_COUNT_TOKENS expects, e.g. "ai_complete" or "summarize"."""
        return self.sql_name.rsplit(".", 1)[-1].lower()

    @property
    def requires_model(self) -> bool:
        return self in (AIFunction.EMBED, AIFunction.COMPLETE)


SQL_NAMES: dict[AIFunction, str] = {
    AIFunction.SENTIMENT: "AI_SENTIMENT",
    AIFunction.EXTRACT: "AI_EXTRACT",
    AIFunction.EMBED: "AI_EMBED",
    AIFunction.SIMILARITY: "AI_SIMILARITY",
    AIFunction.TRANSLATE: "AI_TRANSLATE",
    AIFunction.SUMMARIZE: "SNOWFLAKE.CORTEX.SUMMARIZE",
    AIFunction.SUMMARIZE_AGG: "AI_SUMMARIZE_AGG",
    AIFunction.PARSE_DOCUMENT: "AI_PARSE_DOCUMENT",
    AIFunction.TRANSCRIBE: "AI_TRANSCRIBE",
    AIFunction.COMPLETE: "AI_COMPLETE",
    AIFunction.COUNT_TOKENS: "AI_COUNT_TOKENS",
    AIFunction.CLASSIFY: "AI_CLASSIFY",
    AIFunction.FILTER: "AI_FILTER",
    AIFunction.AGG: "AI_AGG",
}


class CallStatus(str, Enum):
    SUCCESS = "Success"
    FILTERED = "Filtered"
    ERROR = "Error"
    INVALID = "Invalid"
    SKIPPED = "Skipped"


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class SentimentContract(str, Enum):
    """Pinned shape of the AI_SENTIMENT response."""

    CATEGORICAL = "categorical"  # {"categories": [{"name", "sentiment"}]}
    SCORE = "score"  # legacy float in [-1, 1]


class ParseMode(str, Enum):
    OCR = "OCR"
    LAYOUT = "LAYOUT"


class PromptValidation(str, Enum):
    TOO_SHORT = "Too Short"
    TOO_LONG = "Too Long"
    VALID = "Valid"


class ResponseAction(str, Enum):
    MANUAL_REVIEW_REQUIRED = "MANUAL_REVIEW_REQUIRED"
    ESCALATE_TO_SUPERVISOR = "ESCALATE_TO_SUPERVISOR"
    APPROVED_FOR_SENDING = "APPROVED_FOR_SENDING"


class SummaryGrouping(str, Enum):
    USER = "user"
    DAY = "day"
    WEEK = "week"
