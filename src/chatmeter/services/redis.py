"""Redis connection used for scheduled job locks."""

import redis.asyncio as redis

_redis_client: redis.Redis | None = None


async def connect_redis(url: str) -> redis.Redis:
    """
    Connect to Redis and keep the client for get_redis().

    Repeated calls return the existing client.
    """
    global _redis_client
    if _redis_client is not None:
        return _redis_client

    _redis_client = redis.from_url(url, decode_responses=True)
    return _redis_client


def get_redis_or_none() -> redis.Redis | None:
    """Shared client, or None when Redis is not configured."""
    return _redis_client


async def get_redis() -> redis.Redis:
    """Raises RuntimeError if connect_redis() hasn't been called."""
    if _redis_client is None:
        raise RuntimeError("Redis not connected. Call connect_redis() first.")
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
