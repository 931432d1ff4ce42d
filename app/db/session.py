"""
Database engine and session factory.

The repository receives ``AsyncSessionLocal`` (a session *factory*) and opens
a fresh session for every operation, so no connection outlives the call that
acquired it.
"""

from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.core.config import settings

_IN_MEMORY_SQLITE_URLS = ("sqlite+aiosqlite://", "sqlite+aiosqlite:///:memory:")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    SQLite engines get foreign-key enforcement switched on for every
    connection.  In-memory SQLite additionally uses ``StaticPool`` so that all
    sessions share the same database instead of each getting an empty one.
    """
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url in _IN_MEMORY_SQLITE_URLS:
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(url, echo=echo, **kwargs)

        # aiosqlite delegates to a sync connection, so listen on the sync engine.
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


def build_session_factory(
    bind: Optional[AsyncEngine] = None,
) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind or engine,
        class_=AsyncSession,
        # Attributes stay readable after commit without a lazy reload.
        expire_on_commit=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
AsyncSessionLocal = build_session_factory(engine)
