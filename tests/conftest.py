"""Shared pytest fixtures: in-memory database, users and an API client."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app import models  # noqa: F401  (register mappers)
from app.api.deps import get_current_user
from app.core.database import Base, get_db
from app.core.rate_limit import limiter
from app.main import app as fastapi_app
from app.models.user import User
from tests.mocks.mock_factories import make_user

# Rate limits need Redis; routes are exercised without them.
limiter.enabled = False


@pytest.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """Create an in-memory SQLite session with every table."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        yield sess
    await engine.dispose()


@pytest.fixture
async def user(session: AsyncSession) -> User:
    """A saved, active, non-admin user."""
    account = make_user(email="ada@example.com")
    session.add(account)
    await session.commit()
    return account


@pytest.fixture
async def admin(session: AsyncSession) -> User:
    """A saved admin user."""
    account = make_user(email="admin@example.com", is_admin=True)
    session.add(account)
    await session.commit()
    return account


@pytest.fixture
async def client(session: AsyncSession, user: User) -> AsyncGenerator[AsyncClient, None]:
    """API client bound to the test session, authenticated as ``user``."""

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        yield session

    fastapi_app.dependency_overrides[get_db] = _get_db
    fastapi_app.dependency_overrides[get_current_user] = lambda: user
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()
