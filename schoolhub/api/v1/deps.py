"""
FastAPI dependencies: database session, acting user, org context, services.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.config import settings
from schoolhub.core.security import token_subject
from schoolhub.db.session import async_session_factory
from schoolhub.models.user import User
from schoolhub.repositories.attendance_repository import AttendanceRepository
from schoolhub.services.attendance_service import AttendanceService
from schoolhub.services.rbac import RbacService

# Tokens come from the identity provider; auto_error=False lets the
# access_token cookie stand in when the Authorization header is absent.
bearer_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

_NOT_AUTHENTICATED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Not authenticated",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


def _pick_token(header_token: str | None, cookie_token: str | None) -> str | None:
    """Header wins; a cookie may carry the token with or without ``Bearer ``."""
    if header_token:
        return header_token
    if not cookie_token:
        return None
    scheme, _, value = cookie_token.partition(" ")
    return value if scheme == "Bearer" and value else cookie_token


# ── Acting user ─────────────────────────────────────────────────────
async def get_current_user(
    header_token: Optional[str] = Depends(bearer_scheme),
    access_token: Optional[str] = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = _pick_token(header_token, access_token)
    user_id = token_subject(token) if token else None
    if user_id is None:
        raise _NOT_AUTHENTICATED

    user = await db.get(User, user_id)
    if user is None:
        raise _NOT_AUTHENTICATED
    return user


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user account")
    return user


async def get_verified_user(user: User = Depends(get_current_active_user)) -> User:
    """Attendance routes are closed to accounts with an unverified email."""
    if not user.email_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Email not verified")
    return user


# ── Org context ─────────────────────────────────────────────────────
async def get_org_id(
    org_header: Optional[str] = Header(default=None, alias=settings.ORG_HEADER_KEY),
) -> str:
    org_id = (org_header or "").strip()
    if not org_id:
        raise HTTPException(status_code=400, detail="orgId is required")
    return org_id


# ── Services ────────────────────────────────────────────────────────
async def get_attendance_service(db: AsyncSession = Depends(get_db)) -> AttendanceService:
    return AttendanceService(AttendanceRepository(db), RbacService(db))
