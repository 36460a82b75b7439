"""Integration test fixtures.

Every test gets its own in-memory SQLite database (aiosqlite keeps one
connection per engine, so the schema lives as long as the Database) and,
where needed, its own fakeredis server.
"""

from contextlib import asynccontextmanager

import fakeredis
import pytest

from src.core.keyed_lock import KeyedLock
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.repositories import (
    ConfigChangeRepository,
    RateLimitConfigRepository,
)


@pytest.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def locks():
    return KeyedLock()


@pytest.fixture
def repos(database):
    """Open a session and return (config_repo, change_repo) built on it.

    Usage:
        async with repos() as (config_repo, change_repo):
            ...
    """

    @asynccontextmanager
    async def factory():
        async with database.get_session() as session:
            yield RateLimitConfigRepository(session), ConfigChangeRepository(session)

    return factory
