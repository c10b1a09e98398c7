from __future__ import annotations

import json
import logging
from typing import Any

import redis
from ..core.config import get_settings

logger = logging.getLogger(__name__)


def _get_sync_redis() -> redis.Redis | None:
    """
    Create a fresh sync Redis client per call; None when caching is not configured.
    """
    settings = get_settings()
    if not settings.REDIS_URL:
        return None
    return redis.from_url(
        str(settings.REDIS_URL),
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
    )


async def cached_get(
    key: str,
    set_value: Any | None = None,
    ttl: int | None = None,
) -> Any:
    """
    Async TTL cache backed by Redis.

    Usage:

        value = await cached_get("k")                  # read
        await cached_get("k", set_value=value, ttl=60) # write with TTL

    - On read: returns cached value (deserialized JSON) or None if missing/expired.
    - On write: stores value (serialized JSON) with optional TTL and returns it.
    - Redis being unset or unreachable behaves as a cache miss.
    """
    client = _get_sync_redis()
    if client is None:
        return None if set_value is None else set_value
    try:
        if set_value is None:
            val = client.get(key)
            if val is not None:
                return json.loads(val)
            return None

        serialized = json.dumps(set_value)
        if ttl is not None:
            client.set(key, serialized, ex=ttl)
        else:
            client.set(key, serialized)
        return set_value

    except (redis.RedisError, ValueError) as e:
        logger.warning("Cache access failed for key '%s': %s", key, e)
        return None if set_value is None else set_value
    finally:
        client.close()
