"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from aisql.adapters.persistence.database import get_session
from aisql.application.ports.cortex_port import CortexPort
from aisql.infrastructure.api.dependencies import get_cortex

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    cortex: CortexPort = Depends(get_cortex),
):
    """Check database and Snowflake connectivity."""
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        db_status = f"error: {e}"

    snowflake_status = "connected" if await cortex.ping() else "unreachable"

    healthy = db_status == "connected" and snowflake_status == "connected"
    return {
        "status": "ok" if healthy else "degraded",
        "database": db_status,
        "snowflake": snowflake_status,
        "service": "AISQL gateway",
    }
