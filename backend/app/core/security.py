"""
Security utilities.

JWT access-token validation. Tokens are issued by the identity service and
only verified here.
"""

from __future__ import annotations

from typing import Any

from jose import JWTError, jwt

from app.core.config import settings


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an access token.

    Raises:
        JWTError: If the token is invalid, expired, or not an access token.
    """
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type", "access") != "access":
        raise JWTError("Not an access token")
    if not payload.get("sub"):
        raise JWTError("Token has no subject")
    return payload
