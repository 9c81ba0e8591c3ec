"""Base repository pattern implementation for async SQLAlchemy.

Provides the session handling shared by all repositories, plus
dialect-aware INSERT ... ON CONFLICT support.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from github_monitor.db.models import Base

# Generic type variable for model classes
ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Base repository with common async session handling.

    Repositories never commit: the caller owns the session and decides
    the transaction boundary, so several repositories sharing one
    session are applied atomically.

    Usage:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, User)

            async def add_ignore(self, data: UserCreate) -> None:
                stmt = self._insert().values(**data.model_dump()).on_conflict_do_nothing()
                await self._session.execute(stmt)
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelT]) -> None:
        """Initialize the repository with a session.

        Args:
            session: Async SQLAlchemy session (caller manages lifecycle)
            model_class: The SQLAlchemy model class this repository manages
        """
        self._session = session
        self._model_class = model_class

    # -------------------------------------------------------------------------
    # Dialect Helpers
    # -------------------------------------------------------------------------

    def _insert(self) -> Any:
        """Build a dialect-specific INSERT supporting ON CONFLICT clauses.

        Returns:
            sqlite.Insert or postgresql.Insert for the model's table

        Raises:
            NotImplementedError: For dialects without ON CONFLICT support
        """
        dialect = self._session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(self._model_class)
        if dialect == "postgresql":
            return postgresql.insert(self._model_class)
        raise NotImplementedError(f"Upserts are not supported for dialect '{dialect}'")
