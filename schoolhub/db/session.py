"""
Async engine and session factory.

Pool sizing only applies to server databases; SQLite (used by the tests)
gets the driver defaults.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from schoolhub.core.config import settings


def _engine_options(database_url: str) -> dict[str, object]:
    options: dict[str, object] = {"pool_pre_ping": True}
    if make_url(database_url).get_backend_name() == "postgresql":
        options.update(pool_size=20, max_overflow=10, pool_recycle=300)
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
