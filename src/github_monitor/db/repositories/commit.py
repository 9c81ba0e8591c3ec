"""Repository for Commit model operations."""

from datetime import datetime

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from github_monitor.db.models import Commit
from github_monitor.schemas import AuthorCommitCount, CommitCreate

from .base import BaseRepository


class CommitRepository(BaseRepository[Commit]):
    """Repository for Commit entities.

    Commits are insert-only: a row is never updated, and rows are removed
    only in bulk when a repository is reset.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: Async SQLAlchemy session
        """
        super().__init__(session, Commit)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def list_for_repository(
        self,
        repository_id: int,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[Commit]:
        """List commits of a repository, newest first.

        Args:
            repository_id: Repository ID
            since: Only commits authored at or after this time
            until: Only commits authored at or before this time

        Returns:
            Commits ordered by author_date descending
        """
        stmt = select(Commit).where(Commit.repository_id == repository_id)
        if since is not None:
            stmt = stmt.where(Commit.author_date >= since)
        if until is not None:
            stmt = stmt.where(Commit.author_date <= until)
        stmt = stmt.order_by(Commit.author_date.desc())

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_repository(self, repository_id: int) -> int:
        """Count stored commits of a repository."""
        stmt = select(func.count()).where(Commit.repository_id == repository_id)
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    async def top_authors(self, repository_id: int, limit: int) -> list[AuthorCommitCount]:
        """Authors with the most commits in a repository.

        Args:
            repository_id: Repository ID
            limit: Maximum number of authors to return

        Returns:
            Author counts, highest first (ties in unspecified order)
        """
        commit_count = func.count().label("commit_count")
        stmt = (
            select(Commit.author_name, commit_count)
            .where(Commit.repository_id == repository_id)
            .group_by(Commit.author_name)
            .order_by(desc(commit_count))
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [
            AuthorCommitCount(author_name=row.author_name, commit_count=row.commit_count)
            for row in result
        ]

    # -------------------------------------------------------------------------
    # Write Methods
    # -------------------------------------------------------------------------

    async def insert_ignore(self, data: CommitCreate) -> bool:
        """Insert a commit unless (sha, repository_id) already exists.

        Args:
            data: Commit to insert

        Returns:
            True if a row was inserted, False if it already existed
        """
        stmt = (
            self._insert()
            .values(**data.model_dump())
            .on_conflict_do_nothing(index_elements=[Commit.sha, Commit.repository_id])
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def delete_for_repository(self, repository_id: int) -> int:
        """Delete every commit of a repository.

        Returns:
            Number of rows deleted
        """
        stmt = (
            delete(Commit)
            .where(Commit.repository_id == repository_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount
