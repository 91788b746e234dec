from __future__ import annotations

import redis

from leapboard.core.config import settings

_pool: redis.ConnectionPool | None = None


def get_pool() -> redis.ConnectionPool:
    # Report quota counters and the readiness check share one pool per process.
    global _pool
    if _pool is None:
        _pool = redis.ConnectionPool.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout_seconds,
            socket_connect_timeout=settings.redis_socket_timeout_seconds,
        )
    return _pool


def get_redis() -> redis.Redis:
    return redis.Redis(connection_pool=get_pool())
