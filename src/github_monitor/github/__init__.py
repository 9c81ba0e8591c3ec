"""GitHub API client module.

This module provides:
- GitHubClient: Async GitHub API client for repositories and commits
- RateLimiter: Header-driven throttling with a single retry on 429
- Sync: SyncService, PollWorker, MonitorSupervisor
"""

from .client import GitHubClient
from .exceptions import (
    GitHubClientError,
    GitHubMalformedResponseError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTransientError,
)
from .rate_limiter import QuotaSnapshot, RateLimiter
from .sync import (
    MonitorSupervisor,
    OutputFormat,
    PollWorker,
    SyncResult,
    SyncService,
    SyncStage,
    WorkerState,
)

__all__ = [
    # Client
    "GitHubClient",
    # Exceptions
    "GitHubClientError",
    "GitHubMalformedResponseError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubTransientError",
    # Rate limiting
    "QuotaSnapshot",
    "RateLimiter",
    # Sync
    "MonitorSupervisor",
    "OutputFormat",
    "PollWorker",
    "SyncResult",
    "SyncService",
    "SyncStage",
    "WorkerState",
]
