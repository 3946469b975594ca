# tvcatalog/infra/cache.py
from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from tvcatalog.core.settings import settings

logger = logging.getLogger(__name__)

_redis: Optional[redis.Redis] = None


def init(url: str) -> None:
    """Synchronous init. Stores a global Redis client."""
    global _redis
    _redis = redis.from_url(url, decode_responses=True)


def client() -> redis.Redis:
    """
    Return a Redis client, lazily initialised from REDIS_URL.
    """
    if _redis is None:
        init(settings.redis_url)
    return _redis  # type: ignore[return-value]


async def get_json(key: str) -> Any:
    c = client()
    val = await c.get(key)
    if val is None:
        return None
    try:
        return json.loads(val)
    except json.JSONDecodeError:
        logger.warning("Discarding undecodable cache entry %s", key)
        return None


async def set_json(key: str, value: Any, ttl: int = 3600) -> None:
    c = client()
    data = json.dumps(value, ensure_ascii=False, default=str)
    await c.set(key, data, ex=ttl)


async def cached_json(key: str, ttl: int, loader: Callable[[], Awaitable[Any]]) -> Any:
    """
    Read-through cache. A Redis outage degrades to calling `loader` directly.
    """
    try:
        hit = await get_json(key)
    except RedisError as e:
        logger.warning("Cache read failed for %s: %r", key, e)
        return await loader()
    if hit is not None:
        return hit

    value = await loader()
    try:
        await set_json(key, value, ttl=ttl)
    except RedisError as e:
        logger.warning("Cache write failed for %s: %r", key, e)
    return value
