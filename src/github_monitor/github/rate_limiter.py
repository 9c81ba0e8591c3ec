"""Header-driven rate limiting for GitHub API calls.

Every request issued by GitHubClient goes through RateLimiter.execute():

- before the call, block until the quota window resets if the last
  response reported no remaining requests
- after the call, refresh quota state from the x-ratelimit-* and
  retry-after headers and warn when the quota runs low
- on a 429, sleep for retry-after and resend once; a second 429 in a
  row surfaces as GitHubRateLimitError

Other failures (transport errors, 5xx) propagate untouched.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TypeVar

from githubkit.exception import RequestFailed

from github_monitor.config import RateLimitConfig, get_settings
from github_monitor.logging import get_logger

from .exceptions import GitHubRateLimitError

if TYPE_CHECKING:
    from githubkit import Response

logger = get_logger(__name__)

HTTP_TOO_MANY_REQUESTS = 429

ResponseT = TypeVar("ResponseT", bound="Response")


@dataclass(frozen=True)
class QuotaSnapshot:
    """Point-in-time view of the limiter state."""

    remaining: int
    reset_at: datetime
    retry_after: float
    low_quota_warning: int

    @property
    def is_exhausted(self) -> bool:
        """True when calls will block until reset_at."""
        return self.remaining <= 0 and datetime.now(UTC) < self.reset_at

    @property
    def is_low(self) -> bool:
        """True when remaining quota is below the warning threshold."""
        return self.remaining < self.low_quota_warning

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON output."""
        return {
            "remaining": self.remaining,
            "reset_at": self.reset_at.isoformat(),
            "retry_after": self.retry_after,
            "low_quota_warning": self.low_quota_warning,
            "exhausted": self.is_exhausted,
        }


class RateLimiter:
    """Tracks GitHub quota from response headers and throttles requests.

    One limiter belongs to one GitHubClient. Poll workers that share the
    client share the limiter, so all state changes happen under a single
    asyncio.Lock.

    Usage:
        limiter = RateLimiter()
        response = await limiter.execute(
            lambda: github.arequest("GET", "/repos/chromium/chromium")
        )
    """

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        """Initialize the limiter.

        Args:
            config: Rate limit configuration (uses settings if not provided)
        """
        config = config or get_settings().rate_limit
        self._remaining = config.default_quota
        self._reset_at = datetime.now(UTC)
        self._low_quota_warning = config.low_quota_warning
        self._retry_after = 0.0
        self._lock = asyncio.Lock()

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def reset_at(self) -> datetime:
        return self._reset_at

    @property
    def retry_after(self) -> float:
        return self._retry_after

    def snapshot(self) -> QuotaSnapshot:
        """Return an immutable copy of the current state."""
        return QuotaSnapshot(
            remaining=self._remaining,
            reset_at=self._reset_at,
            retry_after=self._retry_after,
            low_quota_warning=self._low_quota_warning,
        )

    # -------------------------------------------------------------------------
    # Quota tracking
    # -------------------------------------------------------------------------
    async def wait_if_needed(self) -> None:
        """Sleep until the quota window resets when no requests remain.

        The lock is held while sleeping, so concurrent callers queue up
        behind the first one and proceed once the window has reset.
        """
        async with self._lock:
            delay = (self._reset_at - datetime.now(UTC)).total_seconds()
            if self._remaining <= 0 and delay > 0:
                logger.warning(
                    "Rate limit exhausted, waiting {delay:.1f}s until reset at {reset_at}",
                    delay=delay,
                    reset_at=self._reset_at.isoformat(),
                )
                await asyncio.sleep(delay)

    async def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Refresh quota state from response headers.

        Headers that are missing or not numeric leave the current value
        unchanged.

        Args:
            headers: Response headers (case-insensitive mapping or lower-cased dict)
        """
        async with self._lock:
            remaining = _parse_int(headers.get("x-ratelimit-remaining"))
            if remaining is not None:
                self._remaining = remaining

            reset = _parse_int(headers.get("x-ratelimit-reset"))
            if reset is not None:
                self._reset_at = datetime.fromtimestamp(reset, tz=UTC)

            retry_after = _parse_int(headers.get("retry-after"))
            if retry_after is not None:
                self._retry_after = float(retry_after)

            if self._remaining < self._low_quota_warning:
                logger.warning(
                    "Low rate limit: {remaining} remaining, resets at {reset_at}",
                    remaining=self._remaining,
                    reset_at=self._reset_at.isoformat(),
                )

    # -------------------------------------------------------------------------
    # Request execution
    # -------------------------------------------------------------------------
    async def execute(self, send: Callable[[], Awaitable[ResponseT]]) -> ResponseT:
        """Run a request through the limiter.

        Args:
            send: Zero-argument coroutine factory issuing the request.
                Called a second time, unchanged, to retry after a 429.

        Returns:
            The successful response

        Raises:
            GitHubRateLimitError: If the retry is throttled as well
            RequestFailed: For any other non-2xx response
            RequestError: For transport failures and timeouts
        """
        await self.wait_if_needed()
        try:
            response = await send()
        except RequestFailed as e:
            await self.update_from_headers(e.response.headers)
            if e.response.status_code != HTTP_TOO_MANY_REQUESTS:
                raise
            response = await self._retry_throttled(send)

        await self.update_from_headers(response.headers)
        return response

    async def _retry_throttled(self, send: Callable[[], Awaitable[ResponseT]]) -> ResponseT:
        delay = self._retry_after
        logger.warning("Received 429, retrying once after {delay}s", delay=delay)
        await asyncio.sleep(delay)

        try:
            return await send()
        except RequestFailed as e:
            await self.update_from_headers(e.response.headers)
            if e.response.status_code != HTTP_TOO_MANY_REQUESTS:
                raise
            raise GitHubRateLimitError(
                "GitHub returned 429 again after retrying",
                retry_after=self._retry_after,
                reset_at=self._reset_at,
            ) from e


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
