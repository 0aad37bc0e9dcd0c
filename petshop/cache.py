"""Redis access for the product summary cache.

Redis is optional: when it cannot be reached the first time, the process stops
trying until :func:`close_redis` resets the state, and :class:`CacheClient`
answers every read with a miss.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any

from redis.asyncio import Redis as RedisClient
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from petshop.settings import get_settings

logger = logging.getLogger(__name__)

PRODUCT_SUMMARY_PREFIX = "products:summary"
FALLBACK_TTL_SECONDS = 300

REDIS_UNAVAILABLE = (RedisConnectionError, RedisTimeoutError, OSError)


class _Connection:
    client: RedisClient | None = None
    unavailable = False
    lock = asyncio.Lock()


def product_summary_key(product_id: int) -> str:
    return f"{PRODUCT_SUMMARY_PREFIX}:{product_id}"


async def get_redis() -> RedisClient | None:
    """Return the shared client, connecting on first use; ``None`` if Redis is down."""

    if _Connection.unavailable:
        return None

    async with _Connection.lock:
        if _Connection.client is not None or _Connection.unavailable:
            return _Connection.client

        client = RedisClient.from_url(
            get_settings().redis_url, decode_responses=True, encoding="utf-8"
        )
        try:
            await client.ping()
        except REDIS_UNAVAILABLE as exc:
            logger.warning("Redis unavailable (%s); product summary cache disabled", exc)
            _Connection.unavailable = True
            await client.aclose()
            return None

        logger.info("Connected to Redis")
        _Connection.client = client
        return client


def _decode(payload: str | None) -> Any:
    if payload is None:
        return None
    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Ignoring non-JSON cache payload")
        return None


class CacheClient:
    """JSON get/set over Redis where every Redis failure reads as a miss."""

    def __init__(self, redis: RedisClient | None) -> None:
        self._redis = redis

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    async def get_many_json(self, keys: Sequence[str]) -> list[Any]:
        """Values aligned with ``keys``; misses and unreadable entries are ``None``."""

        misses: list[Any] = [None] * len(keys)
        if self._redis is None or not keys:
            return misses
        try:
            payloads = await self._redis.mget(list(keys))
        except REDIS_UNAVAILABLE as exc:
            logger.debug("Redis MGET of %d keys failed: %s", len(keys), exc)
            return misses
        return [_decode(payload) for payload in payloads]

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.set(
                key, json.dumps(value, default=str), ex=ttl or FALLBACK_TTL_SECONDS
            )
        except REDIS_UNAVAILABLE as exc:
            logger.debug("Redis SET %s failed: %s", key, exc)


async def get_cache_client() -> CacheClient:
    """FastAPI dependency wrapping the shared client (or its absence)."""

    return CacheClient(await get_redis())


async def close_redis() -> None:
    """Close the shared client and allow the next call to reconnect."""

    client, _Connection.client = _Connection.client, None
    _Connection.unavailable = False
    if client is not None:
        await client.aclose()


__all__ = [
    "CacheClient",
    "close_redis",
    "get_cache_client",
    "get_redis",
    "product_summary_key",
]
