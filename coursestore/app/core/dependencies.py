"""
Identity dependencies for FastAPI.

The checkout flow never reads claims itself: it asks an identity resolver
for the caller's ``user_id``. The default resolver reads a bearer JWT; tests
can override ``resolve_user_id`` with a fixed identity.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from coursestore.app.core.jwt import decode_access_token
from coursestore.app.core.token_revocation import is_token_revoked
from coursestore.app.core.exceptions import AuthenticationError
from coursestore.app.db.session import get_db
from coursestore.app.models.user import User

# Missing credentials are reported as 401 by get_current_user, not by the scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Checks:
    1. A bearer token is present
    2. Token signature and expiry are valid
    3. Token carries a usable ``user_id`` claim
    4. Token has not been revoked by logout
    5. User still exists and is active

    Returns:
        Decoded token payload (``sub``, ``user_id``, ``role``, ``exp``)

    Raises:
        AuthenticationError: 401 if any check fails
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    token = credentials.credentials
    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        raise AuthenticationError("User ID is missing or invalid in token")

    if await is_token_revoked(token):
        raise AuthenticationError("Token has been revoked")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    payload["token"] = token
    return payload


async def resolve_user_id(current_user: dict = Depends(get_current_user)) -> int:
    """Identity resolver: authenticated request -> user_id."""
    return current_user["user_id"]
