"""
Bearer tokens identifying the acting user.

The identity provider signs tokens with the shared ``SECRET_KEY``; the only
claim this service relies on is ``sub`` (the user id).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from schoolhub.core.config import settings

TOKEN_KIND = "access"


def create_access_token(user_id: str, ttl: timedelta | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = ttl or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": TOKEN_KIND,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def token_subject(token: str) -> str | None:
    """User id carried by a valid, unexpired access token."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if claims.get("type") != TOKEN_KIND:
        return None
    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None
