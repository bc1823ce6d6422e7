"""
JWT access and refresh tokens.

Access tokens carry the user's id, email and role at issue time. The role is
advisory only: `get_current_user` re-reads it from the database. Refresh
tokens carry only the user id and are accepted by `/auth/refresh` alone.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from backend.app.core.config import settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def _encode(claims: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    issued_at = datetime.now(timezone.utc)
    to_encode = dict(claims)
    # jti keeps two tokens issued in the same second distinct for revocation
    to_encode.update({
        "type": token_type,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    })
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign an access token.

    Args:
        data: Claims to encode (sub, user_id, email, role)
        expires_delta: Lifetime, defaults to `access_token_expire_minutes`

    Example payload:
        {"sub": "asha", "user_id": 12, "email": "asha@example.com",
         "role": "USER", "type": "access", "jti": ..., "iat": ..., "exp": ...}
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(data, ACCESS_TOKEN, lifetime)


def create_refresh_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.refresh_token_expire_minutes)
    return _encode({"user_id": user_id}, REFRESH_TOKEN, lifetime)


def decode_token(token: str, token_type: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid, unexpired token of `token_type`, else None."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    return decode_token(token, ACCESS_TOKEN)
