"""
Pytest fixtures for the MAGE local store tests.

Provides an in-memory SQLite database, session factories, users and
a ready ServerConfig.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mage_store.db.models import User
from mage_store.db.session import create_engine, create_session_maker, drop_db, init_db
from mage_store.services.server_config import ServerConfig

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a test database engine backed by a temporary SQLite file.

    A file (rather than :memory:) lets separate sessions share one database.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_mage_store.db'}", echo=False)
    await init_db(engine)

    yield engine

    await drop_db(engine)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session maker for the test database."""
    return create_session_maker(test_engine)


@pytest_asyncio.fixture(scope="function")
async def test_session(test_session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with test_session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def server_config(test_session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[ServerConfig, None]:
    """Open a ServerConfig on the test database; drains pending saves afterwards."""
    config = await ServerConfig.open(test_session_maker)
    yield config
    await config.flush()


# =============================================================================
# User Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def users(test_session: AsyncSession) -> tuple[User, User]:
    """Two persisted users."""
    alice = User(username="alice", remote_id="u-alice", display_name="Alice")
    bob = User(username="bob", remote_id="u-bob", display_name="Bob")
    test_session.add_all([alice, bob])
    await test_session.commit()
    return alice, bob


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def observed_at() -> datetime:
    return datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def point_feature(observed_at: datetime) -> dict[str, Any]:
    """A location feature the way a sync collaborator hands it over."""
    return {
        "type": "Feature",
        "id": "loc-1",
        "geometry": {"type": "Point", "coordinates": [-104.99, 39.74]},
        "properties": {
            "timestamp": observed_at.isoformat().replace("+00:00", "Z"),
            "accuracy": 12.5,
            "provider": "gps",
        },
    }
