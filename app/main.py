"""
Fund Registry API — application entry-point.

Initializes the FastAPI application, registers middleware, exception handlers
and routers, and manages the application lifecycle (schema creation and
fund-type seeding on startup, connection pool disposal on shutdown).
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import add_exception_handlers
from app.core.logging import setup_logging
from app.db.base import metadata
from app.db.session import AsyncSessionLocal, engine
from app.middleware import RequestContextMiddleware
from app.seed import seed_fund_types

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: create tables and seed the fund-type lookup, retrying with
    exponential back-off while the database is unreachable.  After the last
    failed attempt the app starts in degraded mode (``/health`` reports it).

    Shutdown: dispose of the connection pool.
    """
    max_retries = 5
    retry_delay = 2  # seconds, doubled after each failure

    for attempt in range(1, max_retries + 1):
        try:
            logger.info("Connecting to database (attempt %d/%d)", attempt, max_retries)
            async with engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
            await seed_fund_types(AsyncSessionLocal)
            logger.info("Database tables ready")
            break
        except Exception as exc:
            if attempt < max_retries:
                logger.warning(
                    "Database connection failed (attempt %d/%d): %s; retrying in %ds",
                    attempt,
                    max_retries,
                    exc,
                    retry_delay,
                )
                await asyncio.sleep(retry_delay)
                retry_delay *= 2
            else:
                logger.error(
                    "Could not connect to database after %d attempts; starting in "
                    "DEGRADED mode. Last error: %s",
                    max_retries,
                    exc,
                )

    yield

    logger.info("Shutting down, disposing connection pool")
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="CRUD API for investment fund records and their net asset value.",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness / readiness probe; runs ``SELECT 1`` against the database."""
    db_healthy = True
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception:
        logger.warning("Health check could not reach the database", exc_info=True)
        db_healthy = False

    return {
        "status": "ok" if db_healthy else "degraded",
        "version": settings.VERSION,
        "database": db_healthy,
    }
