"""Tests for domain enums."""

from aisql.domain.value_objects.enums import (
    AIFunction,
    CallStatus,
    ParseMode,
    PromptValidation,
    ResponseAction,
    SentimentLabel,
)


def test_ai_functions_count():
    assert len(AIFunction) == 14


def test_every_function_has_sql_name():
    for function in AIFunction:
        assert function.sql_name


def test_sql_names():
    assert AIFunction.SENTIMENT.sql_name == "AI_SENTIMENT"
    assert AIFunction.SUMMARIZE.sql_name == "SNOWFLAKE.CORTEX.SUMMARIZE"
    assert AIFunction.COUNT_TOKENS.sql_name == "AI_COUNT_TOKENS"


def test_token_function_names():
    assert AIFunction.COMPLETE.token_function_name == "ai_complete"
    assert AIFunction.SUMMARIZE.token_function_name == "summarize"
    assert AIFunction.SENTIMENT.token_function_name == "ai_sentiment"


def test_requires_model():
    assert AIFunction.COMPLETE.requires_model
    assert AIFunction.EMBED.requires_model
    assert not AIFunction.SENTIMENT.requires_model
    assert not AIFunction.COUNT_TOKENS.requires_model


def test_call_status_values():
    assert CallStatus.SUCCESS.value == "Success"
    assert CallStatus.FILTERED.value == "Filtered"
    assert CallStatus.ERROR.value == "Error"
    assert CallStatus.INVALID.value == "Invalid"
    assert CallStatus.SKIPPED.value == "Skipped"


def test_sentiment_labels_lowercase():
    assert all(label.value == label.value.lower() for label in SentimentLabel)


def test_parse_modes():
    assert ParseMode("OCR") == ParseMode.OCR
    assert ParseMode("LAYOUT") == ParseMode.LAYOUT


def test_prompt_validation_values():
    assert PromptValidation.TOO_SHORT.value == "Too Short"
    assert PromptValidation.TOO_LONG.value == "Too Long"


def test_response_actions():
    assert {a.value for a in ResponseAction} == {
        "MANUAL_REVIEW_REQUIRED",
        "ESCALATE_TO_SUPERVISOR",
        "APPROVED_FOR_SENDING",
    }
