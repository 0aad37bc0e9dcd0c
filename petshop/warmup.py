"""Open database and Redis connections before the first request arrives.

Every step reports success as a bool and logs failures instead of raising, so
a cold or missing backing service never prevents the API from starting.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from petshop import cache
from petshop.db import connection
from petshop.db.connection import begin_engine_transaction

logger = logging.getLogger(__name__)


def _millis_since(started: float) -> float:
    return (time.perf_counter() - started) * 1000


async def warmup_database(
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> bool:
    """Run ``SELECT 1`` on a pooled connection."""
    started = time.perf_counter()
    try:
        engine = (resolve_engine or connection.get_engine)()
        async with begin_engine_transaction(engine) as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database warmup failed: %s", exc)
        return False
    logger.info("Database ready in %.0fms", _millis_since(started))
    return True


async def warmup_redis() -> bool:
    """Connect the product summary cache; ``False`` when Redis is unavailable."""
    started = time.perf_counter()
    try:
        client = await cache.get_redis()
    except Exception as exc:
        logger.warning("Redis warmup failed: %s", exc)
        return False
    if client is None:
        logger.info("Redis warmup skipped: cache disabled")
        return False
    logger.info("Redis ready in %.0fms", _millis_since(started))
    return True


async def warmup_all(
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> None:
    started = time.perf_counter()
    database_ready = await warmup_database(resolve_engine=resolve_engine)
    redis_ready = await warmup_redis()
    logger.info(
        "Warmup finished in %.0fms (database=%s, redis=%s)",
        _millis_since(started),
        database_ready,
        redis_ready,
    )
