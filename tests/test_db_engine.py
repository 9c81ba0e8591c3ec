"""Tests for database engine and session management."""

import pytest
from sqlalchemy import select, text

from github_monitor.config import get_settings
from github_monitor.db import engine as engine_module
from github_monitor.db.engine import (
    create_tables,
    dispose_engine,
    drop_tables,
    get_engine,
    get_session,
)
from github_monitor.db.models import Commit, Repository
from tests.conftest import JAN_10, JAN_15


@pytest.fixture
def default_engine(database_url, monkeypatch):
    """Point the module-level engine at a temporary database."""
    monkeypatch.setenv("DATABASE_URL", database_url)
    get_settings.cache_clear()
    monkeypatch.setattr(engine_module, "_engine", None)
    monkeypatch.setattr(engine_module, "_async_session_factory", None)


class TestDatabaseEngine:
    """Tests for async SQLAlchemy engine operations."""

    async def test_create_tables(self, test_engine):
        """Test that all tables are created successfully."""
        async with test_engine.connect() as conn:
            result = await conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
            tables = {row[0] for row in result.fetchall()}

        assert {"repositories", "commits"} <= tables

    async def test_foreign_keys_enforced(self, test_engine):
        """SQLite connections have foreign key enforcement on."""
        async with test_engine.connect() as conn:
            result = await conn.execute(text("PRAGMA foreign_keys"))
            assert result.scalar() == 1

    async def test_cascade_delete(self, db_session):
        """Deleting a repository removes its commits."""
        repo = Repository(name="chromium/chromium", url="https://github.com/chromium/chromium")
        db_session.add(repo)
        db_session.add(
            Commit(
                sha="a" * 40,
                repository=repo,
                message="Initial commit",
                author_date=JAN_15,
                commit_url="https://github.com/chromium/chromium/commit/" + "a" * 40,
            )
        )
        await db_session.flush()

        await db_session.execute(text("DELETE FROM repositories"))
        result = await db_session.execute(select(Commit))

        assert result.scalars().all() == []


class TestDefaultEngine:
    """Tests for the settings-driven module engine."""

    async def test_get_engine_is_cached(self, default_engine):
        try:
            assert get_engine() is get_engine()
        finally:
            await dispose_engine()

    async def test_get_session_commits(self, default_engine):
        """get_session commits when the block exits normally."""
        try:
            await create_tables()
            async with get_session() as session:
                session.add(Repository(name="python/cpython", url="u", created_at=JAN_10))

            async with get_session() as session:
                stored = await session.scalar(select(Repository.name))
            assert stored == "python/cpython"
        finally:
            await dispose_engine()

    async def test_get_session_rolls_back(self, default_engine):
        """get_session rolls back and re-raises on error."""
        try:
            await create_tables()
            with pytest.raises(ValueError, match="Simulated error"):
                async with get_session() as session:
                    session.add(Repository(name="python/cpython", url="u"))
                    await session.flush()
                    raise ValueError("Simulated error")

            async with get_session() as session:
                assert await session.scalar(select(Repository.name)) is None
        finally:
            await dispose_engine()

    async def test_drop_tables(self, default_engine):
        try:
            await create_tables()
            await drop_tables()
            async with get_engine().connect() as conn:
                result = await conn.execute(
                    text("SELECT name FROM sqlite_master WHERE type='table'")
                )
                assert result.fetchall() == []
        finally:
            await dispose_engine()

    async def test_dispose_resets_engine(self, default_engine):
        first = get_engine()
        await dispose_engine()

        second = get_engine()
        await dispose_engine()

        assert first is not second
