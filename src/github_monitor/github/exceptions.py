"""GitHub client exceptions."""

from datetime import datetime

from github_monitor.errors import (
    ErrorStage,
    MalformedResponseError,
    MonitorError,
    NotFoundError,
    TransientUpstreamError,
)


class GitHubClientError(MonitorError):
    """Base exception for GitHub client errors."""

    reference = "GITHUB_API_ERROR"


class GitHubNotFoundError(NotFoundError, GitHubClientError):
    """Raised when a resource is not found (404)."""

    reference = "REPOSITORY_NOT_FOUND"

    def __init__(self, title: str, detail: str = "") -> None:
        super().__init__(title, detail, stage=ErrorStage.STATUS)


class GitHubTransientError(TransientUpstreamError, GitHubClientError):
    """Raised for failures that may succeed on a later poll.

    Network errors and timeouts carry stage ``network``; unexpected status
    codes carry stage ``status`` and the offending ``status_code``.
    """

    reference = "GITHUB_API_ERROR"

    def __init__(
        self,
        title: str,
        detail: str = "",
        *,
        stage: ErrorStage = ErrorStage.STATUS,
        status_code: int | None = None,
    ) -> None:
        super().__init__(title, detail, stage=stage)
        self.status_code = status_code


class GitHubRateLimitError(GitHubTransientError):
    """Raised when GitHub keeps throttling after the single allowed retry."""

    reference = "GITHUB_RATE_LIMITED"

    def __init__(
        self,
        detail: str = "",
        *,
        status_code: int = 429,
        retry_after: float | None = None,
        reset_at: datetime | None = None,
    ) -> None:
        super().__init__(
            "GitHub rate limit exceeded",
            detail,
            stage=ErrorStage.STATUS,
            status_code=status_code,
        )
        self.retry_after = retry_after
        self.reset_at = reset_at


class GitHubMalformedResponseError(MalformedResponseError, GitHubClientError):
    """Raised when a response body cannot be decoded into the expected shape."""

    reference = "GITHUB_API_ERROR"

    def __init__(self, title: str, detail: str = "") -> None:
        super().__init__(title, detail, stage=ErrorStage.DECODE)
