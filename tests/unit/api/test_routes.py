"""Tests for the HTTP surface with fake service and repository."""

import csv

import pytest
from fastapi.testclient import TestClient

from aisql.adapters.persistence.database import get_session
from aisql.application.use_cases.enrich_records import EnrichRecordsUseCase
from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.application.use_cases.summarize_groups import SummarizeGroupsUseCase
from aisql.config import settings
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.value_objects.enums import AIFunction
from aisql.infrastructure.api.dependencies import (
    get_cortex,
    get_enrich_records_uc,
    get_invoker,
    get_result_repo,
    get_summarize_groups_uc,
)
from aisql.main import create_app


class _FakeScalarResult:
    def scalar(self):
        return 1


class _FakeSession:
    async def execute(self, statement):
        return _FakeScalarResult()


@pytest.fixture
def client(fake_cortex, result_repo):
    invoker = InvokeAIFunctionUseCase(fake_cortex)

    async def _session():
        yield _FakeSession()

    app = create_app()
    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_cortex] = lambda: fake_cortex
    app.dependency_overrides[get_invoker] = lambda: invoker
    app.dependency_overrides[get_result_repo] = lambda: result_repo
    app.dependency_overrides[get_enrich_records_uc] = lambda: EnrichRecordsUseCase(
        invoker, result_repo=result_repo
    )
    app.dependency_overrides[get_summarize_groups_uc] = lambda: SummarizeGroupsUseCase(
        invoker, result_repo=result_repo
    )
    return TestClient(app)


# ─── Health ─────────────────────────────────────────────────────────


def test_health_ok(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["snowflake"] == "connected"


# ─── Functions ──────────────────────────────────────────────────────


def test_invoke_sentiment(client, fake_cortex, positive_sentiment_raw):
    fake_cortex.responses[AIFunction.SENTIMENT] = positive_sentiment_raw

    response = client.post("/api/functions/sentiment", json={"text": "Great support"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Success"
    assert body["value"]["categories"][0] == {"name": "overall", "sentiment": "positive"}
    assert body["contract"] == "categorical"


def test_invoke_complete_filtered(client, fake_cortex):
    fake_cortex.responses[AIFunction.COMPLETE] = None

    response = client.post(
        "/api/functions/complete", json={"text": "Write a reply", "label_kind": "guard"}
    )

    body = response.json()
    assert body["status"] == "Filtered"
    assert body["value"] is None
    assert body["ambiguous"] is True
    assert body["label"] == "Filtered by Guard"
    assert fake_cortex.calls[0].model == settings.default_complete_model


def test_invoke_error_is_reported_not_raised(client, fake_cortex):
    fake_cortex.responses[AIFunction.SUMMARIZE] = TimeoutError("slow warehouse")

    response = client.post("/api/functions/summarize", json={"text": "long"})

    assert response.status_code == 200
    assert response.json()["status"] == "Error"
    assert "slow warehouse" in response.json()["error"]


@pytest.mark.parametrize("path,body", [
    ("/api/functions/complete", {"text": "hi", "options": {"foo": 1}}),
    ("/api/functions/not_a_function", {"text": "hi"}),
    ("/api/functions/translate", {"text": "Hola"}),
    ("/api/functions/parse_document", {"file": "no-stage.pdf"}),
    ("/api/functions/summarize", {"text": "hi", "label_kind": "nope"}),
])
def test_invalid_calls_are_422(client, fake_cortex, path, body):
    response = client.post(path, json=body)
    assert response.status_code == 422
    assert fake_cortex.calls == []


def test_invoke_with_file(client, fake_cortex):
    fake_cortex.responses[AIFunction.TRANSCRIBE] = {"text": "Hello, I need help", "audio_duration": 3.2}

    response = client.post("/api/functions/transcribe", json={"file": "@AUDIO/calls/c1.mp3"})

    assert response.json()["value"]["text"] == "Hello, I need help"
    assert str(fake_cortex.calls[0].payload) == "@AUDIO/calls/c1.mp3"


def test_invoke_persist(client, fake_cortex, result_repo, monkeypatch):
    fake_cortex.responses[AIFunction.SUMMARIZE] = "summary"
    saved = []

    async def _save(self, result):
        saved.append(result)
        return result

    monkeypatch.setattr(
        "aisql.adapters.persistence.repositories.SqlResultRepository.save", _save
    )

    response = client.post(
        "/api/functions/summarize?persist=true", json={"text": "long", "record_key": "T9"}
    )

    assert response.status_code == 200
    assert saved[0].record_key == "T9"


def test_draft_reply(client, fake_cortex):
    fake_cortex.responses[AIFunction.COMPLETE] = "We are on it."
    fake_cortex.responses[AIFunction.SENTIMENT] = {
        "categories": [{"name": "overall", "sentiment": "negative"}]
    }

    response = client.post("/api/functions/reply", json={"text": "My order is late!", "record_key": "T1"})

    body = response.json()
    assert body["action"] == "ESCALATE_TO_SUPERVISOR"
    assert body["response"] == "We are on it."
    assert body["sentiment"] == "negative"


# ─── Processing ─────────────────────────────────────────────────────


def test_process_csv(client, fake_cortex, result_repo, tmp_path, monkeypatch):
    with open(tmp_path / "emails.csv", "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["ticket_id", "content"])
        writer.writeheader()
        writer.writerows([
            {"ticket_id": "T1", "content": "first"},
            {"ticket_id": "T2", "content": ""},
        ])
    monkeypatch.setattr(settings, "csv_data_path", str(tmp_path))
    fake_cortex.responses[AIFunction.SUMMARIZE] = "summary"

    response = client.post("/api/process", json={"file_name": "emails.csv", "function": "summarize"})

    assert response.status_code == 200
    body = response.json()
    assert body["total_processed"] == 2
    assert body["status_distribution"]["Success"]["count"] == 1
    assert body["status_distribution"]["Skipped"]["count"] == 1
    assert len(result_repo.saved) == 2


def test_process_record_with_wrong_input_kind(client, fake_cortex, tmp_path, monkeypatch, positive_sentiment_raw):
    with open(tmp_path / "tickets.csv", "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["ticket_id", "content", "file"])
        writer.writeheader()
        writer.writerows([
            {"ticket_id": "T1", "content": "Great support", "file": ""},
            {"ticket_id": "T2", "content": "See screenshot", "file": "@IMAGES/t2.png"},
        ])
    monkeypatch.setattr(settings, "csv_data_path", str(tmp_path))
    fake_cortex.responses[AIFunction.SENTIMENT] = positive_sentiment_raw

    response = client.post(
        "/api/process",
        json={"file_name": "tickets.csv", "function": "sentiment", "file_column": "file"},
    )

    assert response.status_code == 200
    statuses = [r["status"] for r in response.json()["results"]]
    assert statuses == ["Success", "Invalid"]


def test_process_missing_file(client, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "csv_data_path", str(tmp_path))
    response = client.post("/api/process", json={"file_name": "missing.csv", "function": "summarize"})
    assert response.status_code == 400


# ─── Results ────────────────────────────────────────────────────────


def test_results_and_stats(client, result_repo):
    for key, result in [
        ("T1", AIResult.success(AIFunction.SUMMARIZE, value="a")),
        ("T2", AIResult.success(AIFunction.SUMMARIZE, value="b")),
        ("T3", AIResult.filtered(AIFunction.SUMMARIZE)),
    ]:
        result.record_key = key
        result_repo.saved.append(result)

    stats = client.get("/api/results/stats").json()
    assert stats["total"] == 3
    assert stats["status_distribution"]["Success"] == {"count": 2, "percentage": 66.67}

    listed = client.get("/api/results", params={"status": "filtered"}).json()
    assert [r["record_key"] for r in listed] == ["T3"]

    one = client.get("/api/results/summarize/T2").json()
    assert one["value"] == "b"

    assert client.get("/api/results/summarize/T404").status_code == 404
    assert client.get("/api/results", params={"function": "nope"}).status_code == 422


def test_results_filtered_by_contract(client, result_repo):
    for key, contract, value in [("T1", "score", 0.7), ("T2", "categorical", {"categories": []})]:
        result = AIResult.success(AIFunction.SENTIMENT, value=value)
        result.record_key = key
        result.contract = contract
        result_repo.saved.append(result)

    listed = client.get("/api/results", params={"contract": "score"}).json()

    assert [(r["record_key"], r["contract"]) for r in listed] == [("T1", "score")]


# ─── Search and summaries ───────────────────────────────────────────


ARTICLE_VECTORS = {
    "refund": [1.0, 0.0],
    "Refunds\nCancelled tickets are refunded in 5 days\nTags: refund, billing": [0.98, 0.02],
    "Refund status\nCheck the refund status in your account\nTags: refund": [0.9, 0.1],
    "Seats\nChange your seat in the app\nTags: seats": [0.0, 1.0],
}


def _write_articles(path):
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["article_id", "title", "solution", "tags"])
        writer.writeheader()
        writer.writerows([
            {"article_id": "A1", "title": "Refunds", "solution": "Cancelled tickets are refunded in 5 days", "tags": "refund, billing"},
            {"article_id": "A2", "title": "Seats", "solution": "Change your seat in the app", "tags": "seats"},
            {"article_id": "A3", "title": "Refund status", "solution": "Check the refund status in your account", "tags": "refund"},
        ])


@pytest.fixture
def articles(client, fake_cortex, tmp_path, monkeypatch):
    _write_articles(tmp_path / "articles.csv")
    monkeypatch.setattr(settings, "csv_data_path", str(tmp_path))
    fake_cortex.responses[AIFunction.EMBED] = lambda call: ARTICLE_VECTORS.get(call.payload)
    return {"file_name": "articles.csv", "source": "articles"}


def test_search_articles(client, fake_cortex, articles):
    response = client.post("/api/search", json={**articles, "query": "refund", "top_k": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["embedded"] == 3
    assert [m["record_key"] for m in body["matches"]] == ["A1", "A3"]
    assert body["matches"][0]["preview"].startswith("Refunds")
    assert all(c.model == settings.default_embed_model for c in fake_cortex.calls)


def test_search_duplicates_and_clusters(client, articles):
    pairs = client.post("/api/search/duplicates", json={**articles, "threshold": 0.8}).json()["pairs"]
    assert [(p["first"], p["second"]) for p in pairs] == [("A1", "A3")]

    clusters = client.post("/api/search/clusters", json=articles).json()["clusters"]
    assert {c["record_key"] for c in clusters} == {"A1", "A3"}
    assert clusters[0]["similar_count"] == 1


def test_search_empty_query_is_422(client, articles):
    assert client.post("/api/search", json={**articles, "query": " "}).status_code == 422


def test_search_query_embedding_failure_is_502(client, fake_cortex, articles):
    def _embed(call):
        if call.payload == "refund":
            raise TimeoutError("slow warehouse")
        return ARTICLE_VECTORS.get(call.payload)

    fake_cortex.responses[AIFunction.EMBED] = _embed

    assert client.post("/api/search", json={**articles, "query": "refund"}).status_code == 502


def test_summaries_by_user(client, fake_cortex, result_repo, tmp_path, monkeypatch):
    with open(tmp_path / "emails.csv", "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["ticket_id", "user_id", "content", "created_at"])
        writer.writeheader()
        writer.writerows([
            {"ticket_id": "T1", "user_id": "1", "content": "Refund request", "created_at": "2026-03-02 09:00:00"},
            {"ticket_id": "T2", "user_id": "1", "content": "Refund still missing", "created_at": "2026-03-04 08:00:00"},
            {"ticket_id": "T3", "user_id": "2", "content": "Seat change", "created_at": "2026-03-04 10:00:00"},
        ])
    monkeypatch.setattr(settings, "csv_data_path", str(tmp_path))
    fake_cortex.responses[AIFunction.SUMMARIZE_AGG] = lambda call: f"{len(call.payload)} tickets"

    response = client.post(
        "/api/process/summaries",
        json={"file_name": "emails.csv", "source": "emails", "group_by": "user", "min_records": 2},
    )

    assert response.status_code == 200
    groups = response.json()["groups"]
    assert [(g["group"], g["record_count"], g["value"]) for g in groups] == [("1", 2, "2 tickets")]
    assert groups[0]["record_key"] == "user:1"
    assert result_repo.saved[0].record_key == "user:1"


def test_summaries_unknown_grouping_is_422(client, tmp_path, monkeypatch):
    (tmp_path / "emails.csv").write_text("ticket_id,content\nT1,hi\n", encoding="utf-8")
    monkeypatch.setattr(settings, "csv_data_path", str(tmp_path))

    response = client.post("/api/process/summaries", json={"file_name": "emails.csv", "group_by": "month"})

    assert response.status_code == 422
