"""Repository for GitHub Repository model operations."""

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from github_monitor.db.models import Repository
from github_monitor.schemas import RepositoryUpsert, ensure_utc

from .base import BaseRepository

# Columns refreshed from upstream on every sync (last write wins)
_UPSERT_COLUMNS = (
    "description",
    "url",
    "language",
    "forks_count",
    "stars_count",
    "open_issues_count",
    "watchers_count",
    "updated_at",
)


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for monitored GitHub Repository entities."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: Async SQLAlchemy session
        """
        super().__init__(session, Repository)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def get_by_name(self, name: str) -> Repository | None:
        """Get a repository by its full name (owner/repo), ignoring case.

        GitHub treats owner and repository names case-insensitively, so
        "Chromium/Chromium" finds the row stored as "chromium/chromium".

        Args:
            name: Full repository name (e.g., "chromium/chromium")

        Returns:
            Repository or None if not found
        """
        stmt = select(Repository).where(func.lower(Repository.name) == name.lower())
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Repository]:
        """Get all stored repositories ordered by name."""
        result = await self._session.execute(select(Repository).order_by(Repository.name))
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Write Methods
    # -------------------------------------------------------------------------

    async def upsert(self, data: RepositoryUpsert) -> tuple[int, datetime | None]:
        """Insert a repository or update its metadata if the name exists.

        The watermark is never touched here, so the value returned is the
        one stored before this sync.

        Args:
            data: Repository metadata keyed by name

        Returns:
            Tuple of (repository_id, previous_watermark)
        """
        values = data.model_dump()
        stmt = self._insert().values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Repository.name],
            set_={column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
        ).returning(Repository.id, Repository.last_commit_fetched_at)

        row = (await self._session.execute(stmt)).one()
        watermark = row.last_commit_fetched_at
        return row.id, ensure_utc(watermark) if watermark is not None else None

    async def update_watermark(self, repository_id: int, fetched_at: datetime | None) -> int:
        """Set the last-fetched timestamp for a repository.

        Args:
            repository_id: Repository ID
            fetched_at: New watermark (None clears it)

        Returns:
            Number of rows updated (0 if the repository does not exist)
        """
        stmt = (
            update(Repository)
            .where(Repository.id == repository_id)
            .values(last_commit_fetched_at=fetched_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount
