"""Tests for SnowflakeCortexAdapter with a fake connection."""

import pytest
from snowflake.connector.errors import ProgrammingError

from aisql.adapters.snowflake.cortex_adapter import SnowflakeCortexAdapter
from aisql.domain.entities.ai_call import AICall
from aisql.domain.errors import ExternalServiceError, InvalidCallError
from aisql.domain.value_objects.enums import AIFunction


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn

    def execute(self, sql, params=None, timeout=None):
        self._conn.executed.append((sql, params, timeout))
        if self._conn.error is not None:
            raise self._conn.error

    def fetchone(self):
        return self._conn.row

    def close(self):
        self._conn.cursors_closed += 1


class FakeConnection:
    def __init__(self, row=None, error=None):
        self.row = row
        self.error = error
        self.executed = []
        self.cursors_closed = 0
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def is_closed(self):
        return self.closed

    def close(self):
        self.closed = True


def _adapter(conn: FakeConnection) -> SnowflakeCortexAdapter:
    return SnowflakeCortexAdapter(connection_factory=lambda: conn, timeout=30)


@pytest.mark.asyncio
async def test_execute_runs_bound_statement():
    conn = FakeConnection(row=("Short summary",))
    adapter = _adapter(conn)

    raw = await adapter.execute(AICall.build(AIFunction.SUMMARIZE, "long text"))

    assert raw == "Short summary"
    sql, params, timeout = conn.executed[0]
    assert sql == "SELECT SNOWFLAKE.CORTEX.SUMMARIZE(%(text)s) AS RESULT"
    assert params == {"text": "long text"}
    assert timeout == 30
    assert conn.cursors_closed == 1


@pytest.mark.asyncio
async def test_null_row_value_returned_as_none():
    adapter = _adapter(FakeConnection(row=(None,)))
    raw = await adapter.execute(AICall.build(AIFunction.COMPLETE, "hi", model="m"))
    assert raw is None


@pytest.mark.asyncio
async def test_no_row_returned_as_none():
    adapter = _adapter(FakeConnection(row=None))
    assert await adapter.execute(AICall.build(AIFunction.SUMMARIZE, "x")) is None


@pytest.mark.asyncio
async def test_variant_text_left_for_classifier():
    raw_json = '{"categories": [{"name": "overall", "sentiment": "positive"}]}'
    adapter = _adapter(FakeConnection(row=(raw_json,)))
    raw = await adapter.execute(AICall.build(AIFunction.SENTIMENT, "great"))
    assert raw == raw_json


@pytest.mark.asyncio
async def test_complete_options_object_decoded():
    raw_json = '{"choices": [{"messages": "Hello"}], "usage": {"total_tokens": 5}}'
    adapter = _adapter(FakeConnection(row=(raw_json,)))
    call = AICall.build(AIFunction.COMPLETE, "hi", model="m", options={"temperature": 0.2})

    raw = await adapter.execute(call)

    assert raw["choices"][0]["messages"] == "Hello"


@pytest.mark.asyncio
async def test_plain_completion_text_not_decoded():
    adapter = _adapter(FakeConnection(row=("{curly} but not json",)))
    raw = await adapter.execute(AICall.build(AIFunction.COMPLETE, "hi", model="m"))
    assert raw == "{curly} but not json"


@pytest.mark.asyncio
async def test_driver_error_wrapped():
    error = ProgrammingError(msg="Unknown function AI_MAGIC", errno=2140)
    adapter = _adapter(FakeConnection(error=error))

    with pytest.raises(ExternalServiceError) as exc_info:
        await adapter.execute(AICall.build(AIFunction.SUMMARIZE, "x"))

    assert exc_info.value.original is error
    assert "Unknown function AI_MAGIC" in str(exc_info.value)


@pytest.mark.asyncio
async def test_ping():
    assert await _adapter(FakeConnection(row=(1,))).ping()
    assert not await _adapter(FakeConnection(error=ProgrammingError(msg="down"))).ping()


def test_connection_reused_and_closed():
    created = []

    def factory():
        conn = FakeConnection(row=("x",))
        created.append(conn)
        return conn

    adapter = SnowflakeCortexAdapter(connection_factory=factory, timeout=5)
    assert adapter._connection() is adapter._connection()
    adapter.close()

    assert len(created) == 1
    assert created[0].closed


@pytest.mark.asyncio
async def test_percent_in_categories_reaches_connector_escaped():
    conn = FakeConnection(row=('{"labels": ["refund 100%"]}',))
    call = AICall.build(AIFunction.CLASSIFY, "money back", categories=["refund 100%", "other"])

    await _adapter(conn).execute(call)

    sql, params, _ = conn.executed[0]
    assert "['refund 100%%', 'other']" in sql
    assert sql % params


@pytest.mark.asyncio
async def test_unbuildable_call_never_reaches_connector():
    conn = FakeConnection(row=("x",))
    call = AICall.build(AIFunction.CLASSIFY, "text", categories=[object()])

    with pytest.raises(InvalidCallError):
        await _adapter(conn).execute(call)
    assert conn.executed == []
