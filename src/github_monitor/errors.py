"""Application error taxonomy for GitHub Monitor.

Every error raised by the monitor derives from MonitorError and carries
enough context to be logged by a poll worker or rendered as a structured
error response by the CLI:

- reference: stable machine-readable code (e.g. "DB_REPOSITORY_ERROR")
- title/detail: human-readable summary and explanation
- severity: maps to an HTTP status class in the error response
- stage: which step produced the error (network, status, decode, ...)
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import IntEnum, StrEnum
from typing import Any


class ErrorSeverity(IntEnum):
    """Severity of an application error (lower is more severe)."""

    FATAL = 1
    ERROR = 2
    WARNING = 3
    INFO = 4

    @property
    def http_status(self) -> int:
        """HTTP status code reported for this severity."""
        return _SEVERITY_STATUS[self]


_SEVERITY_STATUS = {
    ErrorSeverity.FATAL: 500,
    ErrorSeverity.ERROR: 400,
    ErrorSeverity.WARNING: 409,
    ErrorSeverity.INFO: 200,
}

_SEVERITY_RESOLUTION = {
    ErrorSeverity.FATAL: "Please contact support with the error reference",
    ErrorSeverity.WARNING: "Please review your request and try again",
}


class ErrorStage(StrEnum):
    """Where in the pipeline an error originated."""

    NETWORK = "network"
    STATUS = "status"
    DECODE = "decode"
    PERSISTENCE = "persistence"
    CONFIGURATION = "configuration"


class MonitorError(Exception):
    """Base exception for all GitHub Monitor errors."""

    reference: str = "MONITOR_ERROR"
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        title: str,
        detail: str = "",
        *,
        reference: str | None = None,
        severity: ErrorSeverity | None = None,
        stage: ErrorStage | None = None,
    ) -> None:
        super().__init__(title)
        self.title = title
        self.detail = detail
        if reference is not None:
            self.reference = reference
        if severity is not None:
            self.severity = severity
        self.stage = stage
        self.occurred_at = datetime.now(UTC)

    def __str__(self) -> str:
        message = f"[{self.reference}] {self.title}"
        if self.detail:
            message += f" - {self.detail}"
        if self.__cause__ is not None:
            message += f" (caused by: {self.__cause__})"
        return message

    @property
    def http_status(self) -> int:
        """HTTP status code this error maps to."""
        return self.severity.http_status

    def to_response(self) -> dict[str, Any]:
        """Build the structured error response body.

        Returns:
            Dict with status, error_reference, title, detail,
            resolution (when the severity has one) and timestamp.
        """
        response: dict[str, Any] = {
            "status": self.http_status,
            "error_reference": self.reference,
            "title": self.title,
            "timestamp": self.occurred_at.isoformat(),
        }
        if self.detail:
            response["detail"] = self.detail
        resolution = _SEVERITY_RESOLUTION.get(self.severity)
        if resolution:
            response["resolution"] = resolution
        return response


def error_response(error: BaseException) -> dict[str, Any]:
    """Build a structured error response for any exception.

    Unknown exceptions are reported as a generic 500 with the
    exception text as detail.
    """
    if isinstance(error, MonitorError):
        return error.to_response()
    return {
        "status": 500,
        "title": "An unexpected error occurred",
        "detail": str(error),
        "timestamp": datetime.now(UTC).isoformat(),
    }


# -----------------------------------------------------------------------------
# Error families
# -----------------------------------------------------------------------------
class NotFoundError(MonitorError):
    """A requested resource does not exist."""

    reference = "NOT_FOUND"
    severity = ErrorSeverity.INFO


class TransientUpstreamError(MonitorError):
    """Upstream failure that may succeed on a later attempt.

    Covers network errors, timeouts, unexpected status codes and
    repeated throttling.
    """

    reference = "GITHUB_API_ERROR"


class MalformedResponseError(MonitorError):
    """Upstream response body did not decode to the expected shape."""

    reference = "GITHUB_API_ERROR"


class PersistenceError(MonitorError):
    """A database query or transaction failed."""

    reference = "DB_ERROR"


class ConfigurationError(MonitorError):
    """Invalid or missing configuration (fatal at startup)."""

    reference = "CONFIGURATION_ERROR"
    severity = ErrorSeverity.FATAL


class RepositoryNotFoundError(NotFoundError):
    """Repository is not present in the local store."""

    reference = "DB_REPOSITORY_NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(
            "Repository not found",
            f"Repository '{name}' does not exist",
            stage=ErrorStage.PERSISTENCE,
        )
        self.name = name


class RepositoryAlreadyMonitoredError(MonitorError):
    """Repository is already registered for monitoring."""

    reference = "REPOSITORY_ALREADY_MONITORED"
    severity = ErrorSeverity.WARNING

    def __init__(self, name: str) -> None:
        super().__init__(
            "Repository already monitored",
            f"Repository '{name}' is already being monitored",
        )
        self.name = name
