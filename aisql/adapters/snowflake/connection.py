"""Snowflake connection factory."""

from __future__ import annotations

import logging

import snowflake.connector
from snowflake.connector import SnowflakeConnection

from aisql.config import Settings, settings

logger = logging.getLogger(__name__)


def connect(config: Settings | None = None) -> SnowflakeConnection:
    """Open a connection using the account, warehouse and schema from settings."""
    config = config or settings
    logger.info(
        "Connecting to Snowflake account=%s warehouse=%s database=%s schema=%s",
        config.snowflake_account,
        config.snowflake_warehouse,
        config.snowflake_database,
        config.snowflake_schema,
    )
    return snowflake.connector.connect(
        account=config.snowflake_account,
        user=config.snowflake_user,
        password=config.snowflake_password,
        role=config.snowflake_role,
        warehouse=config.snowflake_warehouse,
        database=config.snowflake_database,
        schema=config.snowflake_schema,
        network_timeout=config.query_timeout_seconds,
    )
