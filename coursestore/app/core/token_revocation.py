"""
Token Revocation using Redis.

Implements token blacklisting so a logged-out JWT stops working
before it expires.
"""

import logging
from coursestore.app.core import redis_client as redis_client_module
from coursestore.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    The entry expires together with the token itself.

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        ttl_seconds = settings.access_token_expire_minutes * 60
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_client_module.redis_client.setex(key, ttl_seconds, str(user_id))
        return True
    except Exception:
        logger.exception("Error revoking token for user %s", user_id)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Fails open when Redis is unreachable: the token signature and expiry
    are still enforced.
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_client_module.redis_client.exists(key)
        return exists > 0
    except Exception:
        logger.warning("Token revocation check unavailable, allowing request")
        return False
