"""
Token Revocation System using Redis.

Implements token blacklisting to immediately invalidate JWT tokens
when users log out or are deactivated.
"""

import logging
from typing import Optional

from redis.exceptions import RedisError

from backend.app.core.config import settings
from backend.app.core.redis_client import get_client

logger = logging.getLogger("tours_booking.auth")

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


async def revoke_token(token: str, user_id: int, ttl_seconds: Optional[int] = None) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    `ttl_seconds` defaults to the access token lifetime; pass the refresh
    lifetime when revoking a refresh token.

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        # Tokens expire on their own, the blacklist entry only has to outlive them
        ttl_seconds = ttl_seconds or settings.access_token_expire_minutes * 60
        await get_client().setex(f"{TOKEN_BLACKLIST_PREFIX}{token}", ttl_seconds, str(user_id))
        return True
    except RedisError as exc:
        logger.error("Error revoking token", extra={"user_id": user_id, "error": str(exc)})
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Redis being unreachable is treated as "not revoked".
    """
    try:
        exists = await get_client().exists(f"{TOKEN_BLACKLIST_PREFIX}{token}")
        return exists > 0
    except RedisError as exc:
        logger.warning("Error checking token revocation", extra={"error": str(exc)})
        return False


async def revoke_all_user_tokens(user_id: int) -> bool:
    """
    Revoke all active tokens for a user.

    Called when an admin deactivates an account.
    """
    try:
        # Must outlive every token issued so far, refresh tokens included
        ttl_seconds = max(settings.access_token_expire_minutes, settings.refresh_token_expire_minutes) * 60
        await get_client().setex(f"{USER_TOKENS_PREFIX}{user_id}:revoked", ttl_seconds, "1")
        return True
    except RedisError as exc:
        logger.error("Error revoking user tokens", extra={"user_id": user_id, "error": str(exc)})
        return False


async def are_user_tokens_revoked(user_id: int) -> bool:
    try:
        exists = await get_client().exists(f"{USER_TOKENS_PREFIX}{user_id}:revoked")
        return exists > 0
    except RedisError as exc:
        logger.warning("Error checking user token revocation", extra={"user_id": user_id, "error": str(exc)})
        return False


async def clear_user_token_revocation(user_id: int) -> bool:
    """Clear the revoke-all flag when a deactivated user is reactivated."""
    try:
        await get_client().delete(f"{USER_TOKENS_PREFIX}{user_id}:revoked")
        return True
    except RedisError as exc:
        logger.error("Error clearing token revocation", extra={"user_id": user_id, "error": str(exc)})
        return False
