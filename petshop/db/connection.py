"""Engine and session factory for the ``users`` / ``products`` database.

PostgreSQL (psycopg) is the production target.  When no ``DATABASE_URL`` is
configured the service falls back to a local SQLite file through aiosqlite.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from petshop.monitoring import setup_query_monitoring
from petshop.settings import POSTGRES_ASYNC_PREFIX, get_settings

logger = logging.getLogger(__name__)

_POSTGRES_POOL_OPTIONS = {
    "pool_size": 10,
    "max_overflow": 20,
    "pool_pre_ping": True,
    "pool_recycle": 1800,
    "pool_timeout": 30,
}

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    return get_settings().resolved_database_url


def create_engine(url: str | None = None) -> AsyncEngine:
    """Build an async engine for ``url`` (defaults to the configured database)."""

    url = url or get_database_url()
    options = _POSTGRES_POOL_OPTIONS if url.startswith(POSTGRES_ASYNC_PREFIX) else {}
    engine = create_async_engine(url, future=True, echo=False, **options)
    setup_query_monitoring(
        engine, slow_query_threshold=get_settings().slow_query_threshold
    )
    logger.debug("Created %s engine", engine.dialect.name)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def begin_engine_transaction(engine: AsyncEngine) -> AsyncIterator[AsyncConnection]:
    """Yield a connection inside ``engine.begin()``; committed on clean exit."""

    async with engine.begin() as connection:
        yield connection


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory bound to :func:`get_engine`."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections and forget the process-wide engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None
