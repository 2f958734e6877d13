"""
Schoolhub attendance service: ASGI application.

Run with ``uvicorn schoolhub.main:app``. Routes live in ``api/v1``; the
punch, period and summary logic lives in ``services``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from schoolhub.api.v1.api import api_router
from schoolhub.core.config import settings
from schoolhub.core.enums import GLOBAL_SCOPE_ID, Role
from schoolhub.core.exceptions import register_exception_handlers
from schoolhub.db.base import Base
from schoolhub.db.session import async_session_factory, engine

# Registers every table on Base.metadata before create_all runs
from schoolhub.models.attendance import AttendanceEvent, AttendancePeriodicSummary  # noqa: F401
from schoolhub.models.attendance_settings import AttendanceSettings  # noqa: F401
from schoolhub.models.person import EmployeeOrgAssignment, Person  # noqa: F401
from schoolhub.models.role_assignment import RoleAssignment
from schoolhub.models.user import User

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def _seed_super_admin(email: str) -> None:
    """Create a verified account holding SUPER_ADMIN in the global scope."""
    async with async_session_factory() as session:
        existing = await session.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            logger.debug("Super admin %s already present", email)
            return

        admin = User(email=email, full_name="System Administrator", email_verified=True)
        session.add(admin)
        await session.flush()
        session.add(
            RoleAssignment(user_id=admin.id, role=Role.SUPER_ADMIN.value, scope_id=GLOBAL_SCOPE_ID)
        )
        await session.commit()
        logger.info("Seeded super admin %s (user id %s)", email, admin.id)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.FIRST_SUPER_ADMIN_EMAIL:
        await _seed_super_admin(settings.FIRST_SUPER_ADMIN_EMAIL.strip().lower())

    logger.info(
        "%s v%s ready (timezone %s, elevated roles %s)",
        settings.PROJECT_NAME,
        settings.VERSION,
        settings.APP_TIMEZONE,
        ",".join(settings.ELEVATED_ROLES),
    )
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Punch events and periodic attendance summaries for a multi-tenant school backend",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    if settings.CORS_ORIGINS:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH"],
            allow_headers=["Authorization", "Content-Type", settings.ORG_HEADER_KEY],
        )

    register_exception_handlers(application)
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return application


app = create_app()
