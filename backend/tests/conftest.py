"""
StackIt Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite) with the
       full schema created from the ORM metadata. Service tests talk to a
       session directly; API tests go through an HTTPX AsyncClient with the
       session dependency pointed at the same database.

Fixture Hierarchy (all function-scoped):
    db_engine
    ├── session_factory
    │   ├── db_session ── make_user
    │   └── test_client
    └── mock_db_session (no database at all)
"""

import os

# Must run before any stackit import: settings and the engine read these once
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-for-stackit-suite"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ.pop("ADMIN_EMAIL", None)

from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import stackit.models  # noqa: F401
from stackit.database import Base, get_db_session
from stackit.models.user import User


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """One in-memory database per test; StaticPool keeps it on a single connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for tests that only need to see calls, not data.

    Usage:
        mock_db_session.get.return_value = answer
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_user(db_session):
    """
    Factory for persisted users.

    Usage:
        alice = await make_user("alice")
        admin = await make_user("root", role="admin")
    """

    async def _make(
        username: str,
        role: str = "user",
        is_banned: bool = False,
        email: Optional[str] = None,
        reputation: int = 0,
    ) -> User:
        user = User(
            username=username,
            email=email or f"{username}@stackit.io",
            password_hash="not-a-real-hash",
            role=role,
            is_banned=is_banned,
            reputation=reputation,
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient bound to the FastAPI app.

    Each request gets its own session on the test database and commits on
    success, like the production dependency.

    Usage:
        response = await test_client.get("/health")
    """
    from stackit.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
