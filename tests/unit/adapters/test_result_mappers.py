"""Tests for persistence mappers between AIResult and the ai_results row."""

from datetime import datetime, timezone

import pytest

from aisql.adapters.persistence.models import AIResultModel
from aisql.adapters.persistence.repositories import (
    SqlResultRepository,
    _error_text,
    _result_to_domain,
    to_json,
)
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.errors import ExternalServiceError, UnexpectedResponseError
from aisql.domain.value_objects.enums import AIFunction, CallStatus, SentimentLabel
from aisql.domain.value_objects.file_ref import FileRef
from aisql.domain.value_objects.responses import AspectSentiment, SentimentResult, Transcription


def _model(**overrides) -> AIResultModel:
    fields = dict(
        id=7,
        record_key="T1",
        function="sentiment",
        model=None,
        status="Success",
        value=None,
        error=None,
        ambiguous=False,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return AIResultModel(**fields)


# ─── to_json ────────────────────────────────────────────────────────


def test_to_json_sentiment():
    value = SentimentResult(categories=(AspectSentiment("overall", SentimentLabel.MIXED),))
    assert to_json(value) == {"categories": [{"name": "overall", "sentiment": "mixed"}]}


def test_to_json_nested_values():
    assert to_json({"file": FileRef.parse("@S/a.png"), "n": [1, 2]}) == {"file": "@S/a.png", "n": [1, 2]}
    assert to_json(Transcription(text="hi")) == {"text": "hi", "audio_duration": None, "segments": []}
    assert to_json(None) is None
    assert to_json("text") == "text"


# ─── Row → domain ───────────────────────────────────────────────────


def test_success_row_to_domain():
    result = _result_to_domain(_model(value={"categories": []}))
    assert result.id == 7
    assert result.function == AIFunction.SENTIMENT
    assert result.status == CallStatus.SUCCESS
    assert result.value == {"categories": []}
    assert result.error is None


def test_error_row_rebuilds_error():
    result = _result_to_domain(_model(status="Error", error="timed out"))
    assert isinstance(result.error, ExternalServiceError)
    assert str(result.error) == "timed out"


def test_invalid_row_rebuilds_error():
    result = _result_to_domain(_model(status="Invalid", error="bad shape"))
    assert isinstance(result.error, UnexpectedResponseError)


def test_skipped_row_keeps_reason():
    result = _result_to_domain(_model(status="Skipped", error="too long"))
    assert result.raw == "too long"
    assert result.error is None


# ─── Domain → row ───────────────────────────────────────────────────


def test_error_text():
    assert _error_text(AIResult.skipped(AIFunction.COMPLETE, reason="too long")) == "too long"
    failed = AIResult.failed(AIFunction.COMPLETE, error=ExternalServiceError("boom"))
    assert _error_text(failed) == "boom"
    assert _error_text(AIResult.success(AIFunction.COMPLETE, value="ok")) is None


# ─── Round trip ─────────────────────────────────────────────────────


class RecordingSession:
    """Just enough of AsyncSession for SqlResultRepository.save."""

    def __init__(self):
        self.added: list[AIResultModel] = []

    def add(self, model):
        self.added.append(model)

    async def flush(self):
        for i, model in enumerate(self.added, start=1):
            model.id = i


@pytest.mark.asyncio
async def test_contract_survives_save_and_load():
    session = RecordingSession()
    repo = SqlResultRepository(session)
    score = AIResult.success(AIFunction.SENTIMENT, value=-0.4)
    score.contract = "score"
    score.record_key = "T1"
    categorical = AIResult.success(
        AIFunction.SENTIMENT,
        value=SentimentResult(categories=(AspectSentiment("overall", SentimentLabel.NEGATIVE),)),
    )
    categorical.contract = "categorical"
    categorical.record_key = "T1"

    await repo.save(score)
    await repo.save(categorical)

    loaded = [_result_to_domain(m) for m in session.added]
    assert [r.contract for r in loaded] == ["score", "categorical"]
    assert loaded[0].value == -0.4
    assert loaded[1].value == {"categories": [{"name": "overall", "sentiment": "negative"}]}
    assert [r.id for r in loaded] == [1, 2]


def test_row_without_contract_loads_as_none():
    assert _result_to_domain(_model()).contract is None
