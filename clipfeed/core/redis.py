# ruff: noqa: PLW0603
"""Redis connection management.

Redis is optional: it backs the per-account rate limits and nothing else.
Services receive ``None`` when it is unavailable and skip the limits.
"""

import redis.asyncio as redis

from clipfeed.config import get_settings
from clipfeed.core.errors import RateLimitExceededError
from clipfeed.core.logging import get_logger


logger = get_logger(__name__)

_redis_client: redis.Redis | None = None


async def init_redis() -> redis.Redis:
    """Initialize Redis connection pool."""
    global _redis_client

    settings = get_settings()

    _redis_client = redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_connect_timeout,
        retry_on_timeout=settings.redis_retry_on_timeout,
        health_check_interval=settings.redis_health_check_interval,
        decode_responses=True,
    )

    try:
        await _redis_client.ping()
        logger.info("redis_connected", url=settings.redis_url)
    except redis.ConnectionError as e:
        logger.warning("redis_connection_failed", error=str(e))
        _redis_client = None
        raise

    return _redis_client


async def shutdown_redis() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client:
        await _redis_client.aclose()
        logger.info("redis_disconnected")
        _redis_client = None


def get_redis() -> redis.Redis | None:
    """Get Redis client instance."""
    return _redis_client


async def enforce_rate_limit(
    client: redis.Redis | None,
    key: str,
    limit: int,
    window_seconds: int,
    message: str,
) -> None:
    """Count one hit against a fixed window and reject once over ``limit``.

    No-op when Redis is not configured.

    Raises:
        RateLimitExceededError: If the window already holds ``limit`` hits
    """
    if client is None:
        return

    pipe = client.pipeline()
    pipe.incr(key)
    pipe.expire(key, window_seconds, nx=True)
    count, _ = await pipe.execute()

    if int(count) > limit:
        raise RateLimitExceededError(message)
