"""AISQL gateway — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from aisql.adapters.persistence.database import engine
from aisql.infrastructure.api.dependencies import get_cortex
from aisql.infrastructure.api.routes_functions import router as functions_router
from aisql.infrastructure.api.routes_health import router as health_router
from aisql.infrastructure.api.routes_processing import router as processing_router
from aisql.infrastructure.api.routes_results import router as results_router
from aisql.infrastructure.api.routes_search import router as search_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    get_cortex().close()
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="AISQL gateway",
        description="Snowflake Cortex AI functions with explicit result classification",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(functions_router, prefix="/api")
    app.include_router(processing_router, prefix="/api")
    app.include_router(results_router, prefix="/api")
    app.include_router(search_router, prefix="/api")

    return app


app = create_app()
