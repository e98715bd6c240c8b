"""Fixtures for the SQL store tests: a shared in-memory SQLite engine per test."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from core.infrastructure.database.config import drop_database, get_session_factory, init_database


# StaticPool keeps the single in-memory database alive across sessions
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_database(engine)

    yield engine

    await drop_database(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    yield get_session_factory(test_engine)

