"""Async GitHub API client wrapper using githubkit.

This module provides a typed async interface to the GitHub REST API for
repository metadata and commit history. Every request passes through a
RateLimiter, which owns throttling and the single retry on 429.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from githubkit import GitHub
from githubkit.exception import RequestError, RequestFailed
from pydantic import ValidationError

from github_monitor.config import get_settings
from github_monitor.errors import ErrorStage
from github_monitor.logging import get_logger
from github_monitor.schemas.github_api import GitHubCommit, GitHubCommitList, GitHubRepository

from .exceptions import (
    GitHubMalformedResponseError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTransientError,
)
from .rate_limiter import QuotaSnapshot, RateLimiter

if TYPE_CHECKING:
    from githubkit import Response

logger = get_logger(__name__)


class GitHubClient:
    """Async GitHub API client for repository and commit retrieval.

    Usage:
        async with GitHubClient() as client:
            repo = await client.get_repository("chromium", "chromium")
            commits = await client.list_commits_since("chromium", "chromium", since)

    Or without context manager:
        client = GitHubClient()
        repo = await client.get_repository("chromium", "chromium")
        await client.close()
    """

    def __init__(
        self,
        token: str | None = None,
        rate_limiter: RateLimiter | None = None,
        *,
        timeout: float | None = None,
        per_page: int | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.
            rate_limiter: Limiter every request goes through. A new one is
                created from settings when not provided.
            timeout: Per-request timeout in seconds (default from settings)
            per_page: Commits per page (default from settings, max 100)

        Raises:
            ConfigurationError: If no token is available.
        """
        settings = get_settings()
        self._token = token or settings.require_github_token()
        self._rate_limiter = rate_limiter or RateLimiter(settings.rate_limit)
        self._timeout = timeout or settings.sync.request_timeout_seconds
        self._per_page = per_page or settings.sync.per_page
        self._client: GitHub[Any] | None = None

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            # Retries are decided by the rate limiter only
            self._client = GitHub(self._token, timeout=self._timeout, auto_retry=False)
        return self._client

    @property
    def rate_limiter(self) -> RateLimiter:
        """Access the rate limiter."""
        return self._rate_limiter

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Rate Limit Info
    # -------------------------------------------------------------------------
    async def get_rate_limit(self) -> QuotaSnapshot:
        """Probe the quota endpoint and return the refreshed limiter state.

        The /rate_limit endpoint does not count against the quota.
        """
        await self._get("/rate_limit", resource="rate limit")
        return self._rate_limiter.snapshot()

    # -------------------------------------------------------------------------
    # Repository Methods
    # -------------------------------------------------------------------------
    async def get_repository(self, owner: str, name: str) -> GitHubRepository:
        """Get metadata for a single repository.

        Args:
            owner: Repository owner (org or user)
            name: Repository name

        Returns:
            GitHubRepository

        Raises:
            GitHubNotFoundError: If the repository doesn't exist or is not visible
            GitHubTransientError: On transport failures and unexpected status codes
            GitHubMalformedResponseError: If the body doesn't match the schema
        """
        full_name = f"{owner}/{name}"
        response = await self._get(f"/repos/{owner}/{name}", resource=full_name)
        try:
            return GitHubRepository.model_validate_json(response.content)
        except ValidationError as e:
            raise GitHubMalformedResponseError(
                "Failed to parse GitHub API response",
                f"Could not understand the repository data returned for {full_name}",
            ) from e

    # -------------------------------------------------------------------------
    # Commit Methods
    # -------------------------------------------------------------------------
    async def list_commits_since(
        self,
        owner: str,
        name: str,
        since: datetime | None = None,
        *,
        page: int | None = None,
    ) -> list[GitHubCommit]:
        """List commits of a repository, optionally only those after a watermark.

        With an explicit page, exactly that page is fetched. Otherwise pages
        1, 2, ... are fetched until a page comes back empty or the Link
        header no longer advertises a next page.

        Args:
            owner: Repository owner
            name: Repository name
            since: Only commits after this time (omitted when None)
            page: Fetch only this page

        Returns:
            Commits in the order GitHub returns them (newest first)
        """
        full_name = f"{owner}/{name}"
        path = f"/repos/{owner}/{name}/commits"
        params: dict[str, Any] = {"per_page": self._per_page}
        if since is not None:
            params["since"] = since.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

        if page is not None:
            commits, _ = await self._fetch_commit_page(path, params, page, full_name)
            return commits

        all_commits: list[GitHubCommit] = []
        current_page = 1
        while True:
            commits, has_next = await self._fetch_commit_page(
                path, params, current_page, full_name
            )
            if not commits:
                break
            all_commits.extend(commits)
            if not has_next:
                break
            current_page += 1

        logger.info(
            "Fetched {count} commits for {repo} ({pages} pages)",
            count=len(all_commits),
            repo=full_name,
            pages=current_page,
        )
        return all_commits

    async def _fetch_commit_page(
        self,
        path: str,
        params: dict[str, Any],
        page: int,
        full_name: str,
    ) -> tuple[list[GitHubCommit], bool]:
        """Fetch one page of commits.

        Returns:
            Tuple of (commits, whether the Link header has rel="next")
        """
        response = await self._get(path, {**params, "page": page}, resource=full_name)
        try:
            commits = GitHubCommitList.validate_json(response.content)
        except ValidationError as e:
            raise GitHubMalformedResponseError(
                "Failed to parse commits from GitHub",
                f"Could not understand page {page} of commits returned for {full_name}",
            ) from e
        return commits, _has_next_page(response.headers)

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        resource: str,
    ) -> Response[Any]:
        """Issue a GET through the rate limiter and classify failures."""

        async def send() -> Response[Any]:
            return await self._github.arequest("GET", path, params=params)

        try:
            return await self._rate_limiter.execute(send)
        except GitHubRateLimitError:
            raise
        except RequestFailed as e:
            raise self._handle_error(e, resource) from e
        except RequestError as e:
            raise GitHubTransientError(
                "Failed to reach GitHub",
                f"Could not connect to GitHub API to retrieve {resource}: {e}",
                stage=ErrorStage.NETWORK,
            ) from e

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(
        self, error: RequestFailed, resource: str
    ) -> GitHubTransientError | GitHubNotFoundError:
        """Convert githubkit exceptions to our custom exceptions."""
        status = error.response.status_code

        if status == 404:
            return GitHubNotFoundError(
                "Repository not found on GitHub",
                f"The repository {resource} does not exist or you don't have access to it",
            )
        if status == 403 and error.response.headers.get("x-ratelimit-remaining") == "0":
            return GitHubRateLimitError(
                "GitHub reported an exhausted quota",
                status_code=status,
                reset_at=self._rate_limiter.reset_at,
            )
        return GitHubTransientError(
            "Unexpected response from GitHub API",
            f"GitHub API returned status {status} when fetching {resource}",
            stage=ErrorStage.STATUS,
            status_code=status,
        )


def _has_next_page(headers: Any) -> bool:
    """Check whether a Link header advertises another page."""
    return 'rel="next"' in (headers.get("link") or "")
