"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowtokens.core.config import Settings
from flowtokens.infrastructure.persistence.database import DatabaseManager
from flowtokens.infrastructure.persistence.models import PostModel, UserModel


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an in-memory SQLite database."""
    return Settings(
        _env_file=None,
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        log_format="console",
    )


@pytest_asyncio.fixture
async def db(test_settings: Settings) -> AsyncGenerator[DatabaseManager, None]:
    """Create a database manager with all tables created.

    The in-memory database is shared by every session through a StaticPool.
    """
    manager = DatabaseManager(test_settings)
    await manager.create_tables()

    yield manager

    await manager.drop_tables()
    await manager.disconnect()


@pytest.fixture
def session_factory(db: DatabaseManager) -> async_sessionmaker[AsyncSession]:
    return db.session_factory


@pytest_asyncio.fixture
async def db_session(db: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    async with db.session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def make_user(db: DatabaseManager):
    """Factory fixture inserting a user and returning its id."""
    counter = {"n": 0}

    async def _make_user(email: str | None = None, user_id: int | None = None) -> int:
        counter["n"] += 1
        user = UserModel(
            id=user_id,
            email=email or f"user{counter['n']}@example.com",
            display_name=f"User {counter['n']}",
        )
        async with db.session() as session:
            session.add(user)
            await session.commit()
            return user.id

    return _make_user


@pytest_asyncio.fixture
async def make_post(db: DatabaseManager):
    """Factory fixture inserting a post and returning its id."""

    async def _make_post(post_type: str = "act", post_id: int | None = None) -> int:
        post = PostModel(id=post_id, post_type=post_type, title=f"A {post_type}")
        async with db.session() as session:
            session.add(post)
            await session.commit()
            return post.id

    return _make_post


@pytest.fixture
def app(test_settings: Settings, db: DatabaseManager):
    """Create the application against the test database."""
    from flowtokens.infrastructure.api.app import create_app

    return create_app(test_settings, db)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client for the application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
