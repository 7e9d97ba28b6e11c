"""
Redis connection for the logout token blacklist.

Nothing else in the store depends on Redis; when it is down, revocation
checks fail open and /health reports it.
"""

import logging
import redis.asyncio as redis
from coursestore.app.core.config import settings

logger = logging.getLogger(__name__)

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def ping_redis() -> bool:
    try:
        return bool(await redis_client.ping())
    except Exception as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False


async def close_redis() -> None:
    await redis_client.aclose()
