"""
Redis connection used for token revocation.

The module-level client is looked up through `get_client()` on every call,
so replacing `redis_client` (tests, reconnects) takes effect immediately.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError
from backend.app.core.config import settings

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


def get_client():
    return redis_client


async def ping_redis() -> bool:
    """True when Redis answers PING; used by the readiness check."""
    try:
        return bool(await get_client().ping())
    except (RedisError, OSError):
        return False
