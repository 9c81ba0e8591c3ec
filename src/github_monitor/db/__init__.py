"""Database module for GitHub Monitor."""

from github_monitor.db.engine import (
    build_engine,
    build_session_factory,
    create_tables,
    dispose_engine,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
)
from github_monitor.db.gateway import PersistenceGateway, TransactionScope
from github_monitor.db.models import Base, Commit, Repository
from github_monitor.db.repositories import (
    BaseRepository,
    CommitRepository,
    RepositoryRepository,
)

__all__ = [
    # Models
    "Base",
    "Commit",
    "Repository",
    # Engine
    "build_engine",
    "build_session_factory",
    "create_tables",
    "dispose_engine",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    # Gateway
    "PersistenceGateway",
    "TransactionScope",
    # Repositories
    "BaseRepository",
    "CommitRepository",
    "RepositoryRepository",
]
