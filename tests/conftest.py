"""Test fixtures — a fresh in-memory database per test.

Each test gets its own SQLite engine (aiosqlite + StaticPool so every
session shares the one in-memory connection), the schema is created from
the ORM metadata, and the app's get_db dependency is overridden to hand
out the test session. Nothing leaks between tests.

Settings are read from the environment at import time, so the env vars
below must be set before anything under taskboard is imported.
"""

import os

os.environ["TASKBOARD_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("TASKBOARD_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("TASKBOARD_BCRYPT_ROUNDS", "4")

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from taskboard.auth.jwt import TokenIssuer
from taskboard.config import settings
from taskboard.db.engine import get_db
from taskboard.db.models import Base, User
from taskboard.main import app


@pytest_asyncio.fixture()
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client against the real app, real auth pipeline, test DB."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def issuer() -> TokenIssuer:
    """Issuer sharing the app's signing key, so its tokens work over HTTP."""
    return TokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
    )


@pytest.fixture
def make_user(client):
    """Register a user over HTTP; returns email, password, token, headers."""

    async def _make(name: str = "Test User", email: str = None, password: str = "password_123"):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert r.status_code == 200, r.text
        token = r.json()["token"]
        return {
            "name": name,
            "email": email,
            "password": password,
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make


@pytest.fixture
def add_user(db_session):
    """Insert a user row directly (no hashing cost, no token)."""

    async def _add(name: str = "Someone", email: str = None, deleted: bool = False) -> User:
        user = User(
            name=name,
            email=email or f"row-{uuid.uuid4().hex[:8]}@example.com",
            password_hash="not-a-real-hash",
            deleted=deleted,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _add
