"""Enums for sync operations."""

from enum import Enum


class SyncStage(str, Enum):
    """Step of a repository sync that failed."""

    METADATA_FETCH = "metadata_fetch"
    """Fetching repository metadata from GitHub."""

    COMMIT_FETCH = "commit_fetch"
    """Fetching commits from GitHub."""

    PERSISTENCE = "persistence"
    """Writing repository, commits and watermark in one transaction."""


class WorkerState(str, Enum):
    """Lifecycle state of a poll worker."""

    STARTING = "starting"
    """Created; the initial sync has not finished yet."""

    WAITING = "waiting"
    """Idle until the next interval tick or the stop signal."""

    SYNCING = "syncing"
    """Running an incremental sync."""

    STOPPED = "stopped"
    """Observed the stop signal and exited."""


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
