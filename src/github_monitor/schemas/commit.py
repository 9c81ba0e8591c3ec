"""Pydantic schemas for Commit model and derived aggregates."""

from pydantic import ConfigDict, Field

from .base import SchemaBase, UTCDateTime


class CommitCreate(SchemaBase):
    """Schema for inserting a commit row."""

    # Commit messages are stored verbatim
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=False)

    sha: str = Field(min_length=1, description="Commit SHA")
    repository_id: int = Field(description="Owning repository ID")
    message: str = Field(description="Full commit message")
    author_name: str | None = Field(default=None, description="Git author name")
    author_email: str | None = Field(default=None, description="Git author email")
    author_date: UTCDateTime = Field(description="When the commit was authored (UTC)")
    commit_url: str = Field(description="Canonical commit URL")


class CommitRead(SchemaBase):
    """Schema for reading commit data."""

    sha: str
    repository_id: int
    message: str
    author_name: str | None
    author_email: str | None
    author_date: UTCDateTime
    commit_url: str


class AuthorCommitCount(SchemaBase):
    """Commit count for one author (computed on demand, never stored)."""

    author_name: str | None
    commit_count: int = Field(ge=0)
