"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from aisql.application.ports.cortex_port import CortexPort
from aisql.application.ports.result_repo import ResultRepository
from aisql.domain.entities.ai_call import AICall
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.value_objects.enums import AIFunction, CallStatus


class FakeCortex(CortexPort):
    """Deterministic stand-in for the Snowflake service.

    ``responses`` maps a function to its raw result, an exception to raise,
    or a callable ``call -> raw``.
    """

    def __init__(self, responses: dict[AIFunction, Any] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[AICall] = []

    async def execute(self, call: AICall) -> Any:
        self.calls.append(call)
        response = self.responses.get(call.function)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(call)
        return response

    def count(self, function: AIFunction) -> int:
        return sum(1 for c in self.calls if c.function == function)


class InMemoryResultRepository(ResultRepository):
    def __init__(self):
        self.saved: list[AIResult] = []

    async def save(self, result: AIResult) -> AIResult:
        result.id = len(self.saved) + 1
        self.saved.append(result)
        return result

    async def get_by_record(self, function: AIFunction, record_key: str) -> AIResult | None:
        for result in reversed(self.saved):
            if result.function == function and result.record_key == record_key:
                return result
        return None

    async def find(self, function=None, status=None, limit=100, contract=None) -> list[AIResult]:
        found = [
            r for r in reversed(self.saved)
            if (function is None or r.function == function)
            and (status is None or r.status == status)
            and (contract is None or r.contract == contract)
        ]
        return found[:limit]

    async def count_by_status(self, function: AIFunction | None = None) -> dict[CallStatus, int]:
        counts: dict[CallStatus, int] = {}
        for r in self.saved:
            if function is None or r.function == function:
                counts[r.status] = counts.get(r.status, 0) + 1
        return counts


@pytest.fixture
def fake_cortex():
    return FakeCortex()


@pytest.fixture
def result_repo():
    return InMemoryResultRepository()


@pytest.fixture
def sample_email():
    return (
        "I ordered a laptop three weeks ago and it still hasn't arrived. "
        "Your support line keeps hanging up on me. This is unacceptable."
    )


@pytest.fixture
def positive_sentiment_raw():
    return {
        "categories": [
            {"name": "overall", "sentiment": "positive"},
            {"name": "delivery", "sentiment": "positive"},
        ]
    }
