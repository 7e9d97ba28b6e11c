"""
Access tokens.

Tokens are HS256 JWTs carrying ``sub`` (username), ``user_id`` and
``role``. The ``user_id`` claim is what the identity resolver hands to the
checkout flow.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from coursestore.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``data`` with an ``exp`` claim (default lifetime from settings)."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def create_user_token(user_id: int, username: str, role: str) -> str:
    return create_access_token({"sub": username, "user_id": user_id, "role": role})


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for a bad signature, an expired or a malformed token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
