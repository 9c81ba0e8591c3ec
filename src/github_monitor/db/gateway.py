"""Persistence gateway - transactional facade over the repositories.

All writes of a sync go through one TransactionScope so the repository
upsert, the commit inserts and the watermark update commit together or
not at all:

    async with gateway.transaction() as tx:
        repository_id, previous = await tx.upsert_repository(data)
        for commit in commits:
            await tx.insert_commit(commit)
        await tx.update_watermark(repository_id, now)

Each mutating operation is also available directly on the gateway, in
which case it runs in a transaction of its own.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from github_monitor.errors import ErrorStage, PersistenceError, RepositoryNotFoundError
from github_monitor.logging import get_logger
from github_monitor.schemas import (
    AuthorCommitCount,
    CommitCreate,
    CommitRead,
    RepositoryRead,
    RepositoryUpsert,
    ensure_utc,
)

from .engine import get_session_factory
from .models import Repository
from .repositories import CommitRepository, RepositoryRepository

logger = get_logger(__name__)


class TransactionScope:
    """Mutating operations bound to one session and one transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repositories = RepositoryRepository(session)
        self._commits = CommitRepository(session)

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def upsert_repository(self, data: RepositoryUpsert) -> tuple[int, datetime | None]:
        """Insert or refresh a repository.

        Returns:
            Tuple of (repository_id, watermark stored before this call)
        """
        return await self._repositories.upsert(data)

    async def insert_commit(self, data: CommitCreate) -> bool:
        """Insert a commit, ignoring duplicates.

        Returns:
            True if the commit was new
        """
        return await self._commits.insert_ignore(data)

    async def update_watermark(self, repository_id: int, fetched_at: datetime | None) -> None:
        """Set the last-fetched timestamp of a repository."""
        value = ensure_utc(fetched_at) if fetched_at is not None else None
        await self._repositories.update_watermark(repository_id, value)

    async def reset_repository(self, name: str, since: datetime | None) -> int:
        """Delete all commits of a repository and move its watermark to since.

        Returns:
            Number of commits deleted

        Raises:
            RepositoryNotFoundError: If no repository has this name
        """
        repository = await self.require_repository(name)
        deleted = await self._commits.delete_for_repository(repository.id)
        await self.update_watermark(repository.id, since)
        logger.info(
            "Reset {repo}: deleted {deleted} commits, watermark={since}",
            repo=name,
            deleted=deleted,
            since=since.isoformat() if since else None,
        )
        return deleted

    async def require_repository(self, name: str) -> Repository:
        """Load a repository row or raise RepositoryNotFoundError."""
        repository = await self._repositories.get_by_name(name)
        if repository is None:
            raise RepositoryNotFoundError(name)
        return repository


class PersistenceGateway:
    """Facade for every database operation the monitor performs.

    Usage:
        gateway = PersistenceGateway()
        repo = await gateway.get_repository("chromium/chromium")
        authors = await gateway.get_top_authors("chromium/chromium", 10)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            session_factory: Factory for new sessions (default from engine module)
        """
        self._session_factory = session_factory or get_session_factory()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[TransactionScope]:
        """Open a session and a transaction spanning the block.

        Commits when the block exits normally and rolls back on any
        exception. Database errors are re-raised as PersistenceError.
        """
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield TransactionScope(session)
            except SQLAlchemyError as e:
                raise PersistenceError(
                    "Database transaction failed",
                    str(e),
                    stage=ErrorStage.PERSISTENCE,
                ) from e

    # -------------------------------------------------------------------------
    # Standalone mutating operations
    # -------------------------------------------------------------------------
    async def upsert_repository(self, data: RepositoryUpsert) -> tuple[int, datetime | None]:
        async with self.transaction() as tx:
            return await tx.upsert_repository(data)

    async def insert_commit(self, data: CommitCreate) -> bool:
        async with self.transaction() as tx:
            return await tx.insert_commit(data)

    async def update_watermark(self, repository_id: int, fetched_at: datetime | None) -> None:
        async with self.transaction() as tx:
            await tx.update_watermark(repository_id, fetched_at)

    async def reset_repository(self, name: str, since: datetime | None) -> int:
        """Delete a repository's commits and set its watermark, atomically.

        Raises:
            RepositoryNotFoundError: If no repository has this name
        """
        async with self.transaction() as tx:
            return await tx.reset_repository(name, since)

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------
    async def get_repository(self, name: str) -> RepositoryRead:
        """Get a stored repository by full name.

        Raises:
            RepositoryNotFoundError: If no repository has this name
        """
        async with self.transaction() as tx:
            return RepositoryRead.from_orm(await tx.require_repository(name))

    async def list_repositories(self) -> list[RepositoryRead]:
        """Get every stored repository, ordered by name."""
        async with self.transaction() as tx:
            rows = await RepositoryRepository(tx.session).list_all()
            return RepositoryRead.from_orm_list(rows)

    async def get_commits(
        self,
        name: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[CommitRead]:
        """Get commits of a repository, newest first.

        Both bounds are inclusive and compared against author_date.

        Raises:
            RepositoryNotFoundError: If no repository has this name
        """
        async with self.transaction() as tx:
            repository = await tx.require_repository(name)
            rows = await CommitRepository(tx.session).list_for_repository(
                repository.id,
                since=ensure_utc(since) if since is not None else None,
                until=ensure_utc(until) if until is not None else None,
            )
            return CommitRead.from_orm_list(rows)

    async def get_top_authors(self, name: str, limit: int) -> list[AuthorCommitCount]:
        """Get the authors with the most commits in a repository.

        Raises:
            RepositoryNotFoundError: If no repository has this name
        """
        async with self.transaction() as tx:
            repository = await tx.require_repository(name)
            return await CommitRepository(tx.session).top_authors(repository.id, limit)

    async def count_commits(self, name: str) -> int:
        """Count the commits stored for a repository.

        Raises:
            RepositoryNotFoundError: If no repository has this name
        """
        async with self.transaction() as tx:
            repository = await tx.require_repository(name)
            return await CommitRepository(tx.session).count_for_repository(repository.id)
