"""Snowflake Cortex adapter — implements CortexPort with AISQL functions."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any, Callable

from snowflake.connector import SnowflakeConnection
from snowflake.connector.errors import Error as SnowflakeError

from aisql.adapters.snowflake.connection import connect
from aisql.adapters.snowflake.sql_builder import SqlStatement, build_statement
from aisql.application.ports.cortex_port import CortexPort
from aisql.config import settings
from aisql.domain.entities.ai_call import AICall
from aisql.domain.errors import ExternalServiceError
from aisql.domain.value_objects.enums import AIFunction

logger = logging.getLogger(__name__)


class SnowflakeCortexAdapter(CortexPort):
    """Runs one SELECT per call on a shared connection.

    The connector is blocking, so each query runs in a worker thread. The
    query timeout is enforced by the connector itself, which cancels the
    statement on the server side.
    """

    def __init__(
        self,
        connection_factory: Callable[[], SnowflakeConnection] | None = None,
        timeout: int | None = None,
    ):
        self._factory = connection_factory or connect
        self._timeout = timeout or settings.query_timeout_seconds
        self._conn: SnowflakeConnection | None = None
        self._lock = threading.Lock()

    async def execute(self, call: AICall) -> Any:
        statement = build_statement(call)
        logger.debug("Running %s: %s", call.function.sql_name, statement.sql)
        row = await asyncio.to_thread(self._fetch_one, statement)
        raw = row[0] if row else None
        return self._decode(call, raw)

    async def ping(self) -> bool:
        try:
            row = await asyncio.to_thread(self._fetch_one, SqlStatement("SELECT 1"))
        except ExternalServiceError:
            logger.exception("Snowflake ping failed")
            return False
        return bool(row) and row[0] == 1

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # ─── Internals ──────────────────────────────────────────────────

    def _connection(self) -> SnowflakeConnection:
        with self._lock:
            if self._conn is None or self._conn.is_closed():
                self._conn = self._factory()
            return self._conn

    def _fetch_one(self, statement: SqlStatement) -> tuple | None:
        try:
            cursor = self._connection().cursor()
            try:
                cursor.execute(statement.sql, statement.params or None, timeout=self._timeout)
                return cursor.fetchone()
            finally:
                cursor.close()
        except SnowflakeError as e:
            raise ExternalServiceError(
                f"Snowflake query failed ({getattr(e, 'errno', None)}): {e.msg or e}", original=e
            ) from e

    @staticmethod
    def _decode(call: AICall, raw: Any) -> Any:
        # AI_COMPLETE with model_parameters returns an OBJECT, which the
        # connector hands back as JSON text. Plain completions stay text.
        if (
            call.function == AIFunction.COMPLETE
            and isinstance(raw, str)
            and raw.lstrip().startswith("{")
            and '"choices"' in raw
        ):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                return raw
        return raw
