"""Pytest configuration and shared fixtures.

Usage Guide:
- For ORM model tests: import factories from tests.factories
- For gateway and sync tests: use the `gateway` fixture (file-backed SQLite)
- For GitHub API tests: build responses with tests.fixtures.github_responses
"""

from datetime import UTC, datetime

import pytest

from github_monitor.config import get_settings
from github_monitor.db.engine import build_engine, build_session_factory
from github_monitor.db.gateway import PersistenceGateway
from github_monitor.db.models import Base

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# Define a consistent "test epoch" for deterministic date matching across tests.
# All hardcoded dates should reference these constants for consistency.
# -----------------------------------------------------------------------------

# Base dates (datetime objects for Pydantic/ORM)
JAN_10 = datetime(2024, 1, 10, 9, 0, 0, tzinfo=UTC)   # Repository created
JAN_12 = datetime(2024, 1, 12, 16, 0, 0, tzinfo=UTC)  # Oldest commit
JAN_15 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)  # Middle commit
JAN_16 = datetime(2024, 1, 16, 14, 0, 0, tzinfo=UTC)  # Newest commit
JAN_20 = datetime(2024, 1, 20, 16, 0, 0, tzinfo=UTC)  # Reset watermark

# ISO 8601 strings (for GitHub API mocks)
JAN_10_ISO = "2024-01-10T09:00:00Z"
JAN_12_ISO = "2024-01-12T16:00:00Z"
JAN_15_ISO = "2024-01-15T10:00:00Z"
JAN_16_ISO = "2024-01-16T14:00:00Z"
JAN_20_ISO = "2024-01-20T16:00:00Z"


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Give every test default settings with a dummy token."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def database_url(tmp_path) -> str:
    """URL of a fresh SQLite file for this test.

    A file is used instead of :memory: so every session sees the same data.
    """
    return f"sqlite+aiosqlite:///{tmp_path / 'monitor.db'}"


@pytest.fixture
async def test_engine(database_url):
    """Create a SQLite engine with all tables created."""
    engine = build_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_session_factory(test_engine)


@pytest.fixture
async def db_session(session_factory):
    """Create an async session with auto-rollback.

    Changes are rolled back after each test to ensure isolation.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def gateway(session_factory) -> PersistenceGateway:
    """Persistence gateway bound to the test database."""
    return PersistenceGateway(session_factory)


# -----------------------------------------------------------------------------
# Utility Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def utc_now() -> datetime:
    """Current UTC datetime for tests."""
    return datetime.now(UTC)
