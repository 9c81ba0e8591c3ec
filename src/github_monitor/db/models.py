"""SQLAlchemy ORM models for GitHub Monitor."""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ------------------------------------------------------------------------------
# Repository model
# ------------------------------------------------------------------------------
class Repository(Base):
    """Monitored GitHub repository with its sync watermark."""

    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(Text)  # "owner/name"
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(Text)
    language: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Counters (last write wins on every sync)
    forks_count: Mapped[int] = mapped_column(Integer, default=0)
    stars_count: Mapped[int] = mapped_column(Integer, default=0)
    open_issues_count: Mapped[int] = mapped_column(Integer, default=0)
    watchers_count: Mapped[int] = mapped_column(Integer, default=0)

    # Upstream timestamps
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Watermark: how far commit history has been durably fetched
    last_commit_fetched_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    commits: Mapped[list["Commit"]] = relationship(
        back_populates="repository",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("name", name="unique_repo_name"),)

    def __repr__(self) -> str:
        return f"<Repository(id={self.id}, name='{self.name}')>"


# ------------------------------------------------------------------------------
# Commit model
# ------------------------------------------------------------------------------
class Commit(Base):
    """A commit fetched for a repository. Immutable once inserted."""

    __tablename__ = "commits"

    id: Mapped[int] = mapped_column(primary_key=True)
    sha: Mapped[str] = mapped_column(Text)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE")
    )
    message: Mapped[str] = mapped_column(Text)
    author_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_email: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    commit_url: Mapped[str] = mapped_column(Text)

    repository: Mapped["Repository"] = relationship(back_populates="commits")

    # One row per (sha, repository)
    __table_args__ = (
        UniqueConstraint("sha", "repository_id", name="unique_commit_per_repo"),
        Index("idx_commits_repository_id", "repository_id"),
        Index("idx_commits_author_date", "author_date"),
        Index("idx_commits_author_name", "author_name"),
    )

    def __repr__(self) -> str:
        return f"<Commit(id={self.id}, repo='{self.repository_id}', sha='{self.sha[:7]}')>"
