"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .enums import SyncStage


@dataclass
class SyncResult:
    """Result of one repository sync.

    Failures are captured here instead of raised, so a poll worker can
    log the outcome and keep going.
    """

    repository: str
    """Full repository name (owner/repo), as GitHub spells it once metadata is fetched."""

    repository_id: int | None = None
    """Database ID (None if the sync failed before persistence)."""

    commits_fetched: int = 0
    """Commits returned by GitHub."""

    commits_inserted: int = 0
    """Commits that were new to the store."""

    first_sync: bool = False
    """True if the repository had no watermark before this sync."""

    watermark: datetime | None = None
    """Watermark written by this sync."""

    stage: SyncStage | None = None
    """Step that failed (None on success)."""

    error: Exception | None = None
    """Exception if the sync failed."""

    @property
    def success(self) -> bool:
        """Check if the sync completed without errors."""
        return self.error is None

    @property
    def commits_skipped(self) -> int:
        """Commits that were already stored."""
        return self.commits_fetched - self.commits_inserted

    @classmethod
    def failed(cls, repository: str, stage: SyncStage, error: Exception) -> SyncResult:
        """Build a result for a sync that failed at the given stage."""
        return cls(repository=repository, stage=stage, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dict with all result data
        """
        result: dict[str, Any] = {
            "repository": self.repository,
            "success": self.success,
            "repository_id": self.repository_id,
            "commits_fetched": self.commits_fetched,
            "commits_inserted": self.commits_inserted,
            "first_sync": self.first_sync,
            "watermark": self.watermark.isoformat() if self.watermark else None,
        }
        if self.error is not None:
            result["stage"] = self.stage.value if self.stage else None
            result["error"] = str(self.error)
        return result
