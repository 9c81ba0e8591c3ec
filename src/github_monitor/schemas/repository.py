"""Pydantic schemas for Repository model."""

from pydantic import Field

from .base import SchemaBase, UTCDateTime


def parse_repo_string(repo: str) -> tuple[str, str]:
    """Split an "owner/name" string into its parts.

    Args:
        repo: Repository string like 'chromium/chromium'

    Returns:
        Tuple of (owner, name)

    Raises:
        ValueError: If the string is not exactly two non-empty parts
    """
    parts = repo.strip().split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Repository should be in format owner/name, got '{repo}'")
    return parts[0], parts[1]


class RepositoryUpsert(SchemaBase):
    """Repository metadata written on every sync (keyed by name)."""

    name: str = Field(description="Full repository path (e.g., 'chromium/chromium')")
    description: str | None = Field(default=None, description="Repository description")
    url: str = Field(description="Repository HTML URL")
    language: str | None = Field(default=None, description="Primary language")
    forks_count: int = Field(default=0, ge=0)
    stars_count: int = Field(default=0, ge=0)
    open_issues_count: int = Field(default=0, ge=0)
    watchers_count: int = Field(default=0, ge=0)
    created_at: UTCDateTime | None = Field(default=None, description="Created upstream")
    updated_at: UTCDateTime | None = Field(default=None, description="Last updated upstream")


class RepositoryRead(SchemaBase):
    """Schema for reading repository data."""

    id: int
    name: str
    description: str | None
    url: str
    language: str | None
    forks_count: int
    stars_count: int
    open_issues_count: int
    watchers_count: int
    created_at: UTCDateTime | None
    updated_at: UTCDateTime | None
    last_commit_fetched_at: UTCDateTime | None

    @property
    def owner_and_name(self) -> tuple[str, str]:
        """Split the stored full name into (owner, name)."""
        return parse_repo_string(self.name)
