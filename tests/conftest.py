"""
Shared test fixtures for the attendance test suite.

Every test gets its own in-memory aiosqlite database; the app's ``get_db``
dependency is pointed at it for the duration of the test.
"""

import os
import sys
from typing import AsyncGenerator, Iterable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["APP_TIMEZONE"] = "UTC"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from schoolhub.api.v1.deps import get_db
from schoolhub.core.enums import GLOBAL_SCOPE_ID, Role
from schoolhub.core.security import create_access_token
from schoolhub.db.base import Base
from schoolhub.main import app
from schoolhub.models.person import EmployeeOrgAssignment, Person
from schoolhub.models.role_assignment import RoleAssignment
from schoolhub.models.user import User

ORG_ID = "ORG-0"


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh schema per test, wired into the app's DB dependency."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await test_engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Seeding helpers ─────────────────────────────────────────────────
class Seeder:
    """Creates people, users and role grants directly in the test DB."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def person(
        self,
        first_name: str = "Ada",
        *,
        org_id: str = ORG_ID,
        manager: Person | None = None,
    ) -> Person:
        person = Person(first_name=first_name)
        self.session.add(person)
        await self.session.flush()
        self.session.add(
            EmployeeOrgAssignment(
                person_id=person.id,
                org_id=org_id,
                manager_id=manager.id if manager else None,
            )
        )
        await self.session.commit()
        return person

    async def user(
        self,
        email: str,
        *,
        person: Person | None = None,
        roles: Iterable[Role] = (),
        scope_id: str = GLOBAL_SCOPE_ID,
        verified: bool = True,
        active: bool = True,
    ) -> User:
        user = User(
            email=email,
            person_id=person.id if person else None,
            email_verified=verified,
            is_active=active,
        )
        self.session.add(user)
        await self.session.flush()
        for role in roles:
            self.session.add(RoleAssignment(user_id=user.id, role=role.value, scope_id=scope_id))
        await self.session.commit()
        return user


@pytest.fixture
def seed(db_session: AsyncSession) -> Seeder:
    return Seeder(db_session)


def _auth_headers(user: User, org_id: str | None = ORG_ID) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {create_access_token(user.id)}"}
    if org_id is not None:
        headers["x-org-id"] = org_id
    return headers


@pytest.fixture
def auth_headers():
    """Bearer token (and org header unless ``org_id=None``) for a seeded user."""
    return _auth_headers
