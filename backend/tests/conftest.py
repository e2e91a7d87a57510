"""
Pytest configuration for ProjectHub backend tests.

Service tests run against an in-memory SQLite database; API tests drive the
FastAPI app in-process over httpx's ASGI transport.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-characters")

import uuid
from datetime import UTC, datetime, timedelta
from typing import AsyncGenerator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import get_db
from app.main import app
from app.models import Base, ProjectRole, User
from app.schemas.project import ProjectCreateRequest
from app.services.membership_service import MembershipService
from app.services.project_service import ProjectService


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


def unique_email(prefix: str) -> str:
    """Generate a unique email so fixtures never collide."""
    return f"{prefix}_{uuid.uuid4().hex[:8]}@acme.io"


def make_token(user: User, **overrides: object) -> str:
    """Sign an access token the way the identity service does."""
    payload = {
        "sub": str(user.id),
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(minutes=15),
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user)}"}


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Domain fixtures (service tests)
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make_user(prefix: str = "user", display_name: str = "Test User") -> User:
        user = User(email=unique_email(prefix), display_name=display_name)
        db.add(user)
        await db.flush()
        return user

    return _make_user


@pytest_asyncio.fixture
async def owner(make_user) -> User:
    return await make_user("owner", "Olivia Owner")


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("admin", "Adam Admin")


@pytest_asyncio.fixture
async def member(make_user) -> User:
    return await make_user("member", "Mia Member")


@pytest_asyncio.fixture
async def outsider(make_user) -> User:
    return await make_user("outsider", "Oscar Outsider")


@pytest_asyncio.fixture
async def project(db: AsyncSession, owner: User, admin: User, member: User):
    """A project owned by ``owner`` with ``admin`` and ``member`` already joined."""
    created = await ProjectService(db).create_project(
        ProjectCreateRequest(title="Website Relaunch", description="Q3 launch"), owner
    )
    memberships = MembershipService(db)
    await memberships.create_membership(created.id, admin.id, ProjectRole.admin)
    await memberships.create_membership(created.id, member.id, ProjectRole.member)
    return created


# ---------------------------------------------------------------------------
# Celery
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def queued_emails(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    """Capture invitation emails instead of talking to the broker."""
    sent: list[dict] = []

    def _record(**kwargs: str) -> None:
        sent.append(kwargs)

    monkeypatch.setattr("app.services.invitation_service._queue_invitation_email", _record)
    return sent


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth() -> Callable[[User], dict[str, str]]:
    return auth_headers


@pytest.fixture
def sign_token() -> Callable[..., str]:
    return make_token


@pytest.fixture
def register_user(session_factory: async_sessionmaker[AsyncSession]) -> Callable[..., Awaitable[User]]:
    """Create and commit a user so API requests see it."""

    async def _register(prefix: str = "user", display_name: str = "Test User") -> User:
        async with session_factory() as session:
            user = User(email=unique_email(prefix), display_name=display_name)
            session.add(user)
            await session.commit()
            return user

    return _register
