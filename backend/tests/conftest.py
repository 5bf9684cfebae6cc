"""Shared pytest fixtures for the client core tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from talentdesk.db.session import AuthenticatedSessions, build_sessionmaker
from talentdesk.models import Base
from talentdesk.policy import InMemoryNavigator, NotificationCenter
from tests.factories import FakeClock, RecordingSleep, record_factory  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Provide an in-memory SQLite engine with the schema created.

    A single shared connection keeps the in-memory database alive for the
    whole test; foreign keys are enforced as on PostgreSQL.

    Yields:
        AsyncEngine: Engine bound to a fresh database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(test_engine)


@pytest.fixture
def sessions(session_maker: async_sessionmaker[AsyncSession]) -> AuthenticatedSessions:
    """Session provider the services under test read and write through."""
    return AuthenticatedSessions(session_maker, connect_retries=1)


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Per-test session used by factories to seed rows."""
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def notifier() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def navigator() -> InMemoryNavigator:
    return InMemoryNavigator("/candidates", {"page": "2"})
