"""Tests for GitHubClient.

Tests cover:
- Initialization and token handling
- Repository metadata fetch and error classification
- Commit pagination (Link header, empty page, explicit page)
- since parameter formatting
- Rate limiter integration
"""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from githubkit.exception import RequestError

from github_monitor.config import RateLimitConfig, get_settings
from github_monitor.errors import ConfigurationError, ErrorSeverity, ErrorStage
from github_monitor.github.client import GitHubClient
from github_monitor.github.exceptions import (
    GitHubMalformedResponseError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTransientError,
)
from github_monitor.github.rate_limiter import RateLimiter
from tests.factories import make_github_commit, make_github_repository, make_sha
from tests.fixtures.github_responses import (
    make_request_failed,
    make_response,
    next_link,
    rate_limit_headers,
)


LINK_PAGE_2 = {"link": next_link("chromium", "chromium", 2)}


def commit_page(start: int, count: int) -> list[dict]:
    return [make_github_commit(make_sha(i)) for i in range(start, start + count)]


# -----------------------------------------------------------------------------
# Test Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_github_class():
    """Patch the githubkit GitHub class used by the client."""
    with patch("github_monitor.github.client.GitHub") as mock_class:
        mock_instance = MagicMock()
        mock_instance.arequest = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_class


@pytest.fixture
def mock_github(mock_github_class):
    """The mocked githubkit GitHub instance."""
    return mock_github_class.return_value


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter(RateLimitConfig())


@pytest.fixture
def client(mock_github, rate_limiter) -> GitHubClient:
    return GitHubClient(token="test-token", rate_limiter=rate_limiter)


# -----------------------------------------------------------------------------
# Test: Initialization
# -----------------------------------------------------------------------------
class TestGitHubClientInit:
    """Tests for GitHubClient initialization."""

    def test_init_with_token(self):
        """Client uses the provided token."""
        client = GitHubClient(token="explicit-token")
        assert client._token == "explicit-token"

    def test_init_token_from_settings(self):
        """Client falls back to GITHUB_TOKEN from settings."""
        client = GitHubClient()
        assert client._token == "test-token"

    def test_init_without_token_raises(self, monkeypatch):
        """Client raises ConfigurationError when no token is available."""
        monkeypatch.setenv("GITHUB_TOKEN", "")
        get_settings.cache_clear()

        with pytest.raises(ConfigurationError) as exc_info:
            GitHubClient()

        assert exc_info.value.severity == ErrorSeverity.FATAL

    def test_init_creates_own_rate_limiter(self):
        """A limiter is created when none is injected."""
        client = GitHubClient(token="t")
        assert isinstance(client.rate_limiter, RateLimiter)

    def test_init_uses_injected_rate_limiter(self, rate_limiter):
        """An injected limiter is used as-is."""
        client = GitHubClient(token="t", rate_limiter=rate_limiter)
        assert client.rate_limiter is rate_limiter

    def test_githubkit_retry_disabled(self, mock_github_class, client):
        """githubkit is built with its own retries off and the request timeout."""
        _ = client._github

        mock_github_class.assert_called_once_with("test-token", timeout=30.0, auto_retry=False)

    async def test_context_manager_closes(self, client):
        """Leaving the context drops the githubkit instance."""
        async with client as c:
            _ = c._github
            assert c._client is not None
        assert client._client is None


# -----------------------------------------------------------------------------
# Test: get_repository
# -----------------------------------------------------------------------------
class TestGetRepository:
    """Tests for repository metadata fetch."""

    async def test_parses_repository(self, client, mock_github):
        """A 200 response is decoded into GitHubRepository."""
        mock_github.arequest.return_value = make_response(make_github_repository())

        repo = await client.get_repository("chromium", "chromium")

        assert repo.full_name == "chromium/chromium"
        assert repo.stargazers_count == 19000
        mock_github.arequest.assert_awaited_once_with(
            "GET", "/repos/chromium/chromium", params=None
        )

    async def test_not_found(self, client, mock_github):
        """A 404 becomes GitHubNotFoundError (INFO severity, status stage)."""
        mock_github.arequest.side_effect = make_request_failed(404)

        with pytest.raises(GitHubNotFoundError) as exc_info:
            await client.get_repository("nobody", "nothing")

        error = exc_info.value
        assert error.severity == ErrorSeverity.INFO
        assert error.stage == ErrorStage.STATUS
        assert error.reference == "REPOSITORY_NOT_FOUND"
        assert "nobody/nothing" in error.detail

    async def test_server_error_is_transient(self, client, mock_github):
        """A 5xx becomes GitHubTransientError carrying the status code."""
        mock_github.arequest.side_effect = make_request_failed(503)

        with pytest.raises(GitHubTransientError) as exc_info:
            await client.get_repository("chromium", "chromium")

        assert exc_info.value.status_code == 503
        assert exc_info.value.stage == ErrorStage.STATUS
        mock_github.arequest.assert_awaited_once()

    async def test_network_error_is_transient(self, client, mock_github):
        """Transport failures become GitHubTransientError with network stage."""
        mock_github.arequest.side_effect = RequestError(ConnectionError("connection refused"))

        with pytest.raises(GitHubTransientError) as exc_info:
            await client.get_repository("chromium", "chromium")

        assert exc_info.value.stage == ErrorStage.NETWORK
        assert exc_info.value.status_code is None

    async def test_malformed_body(self, client, mock_github):
        """A body that doesn't match the schema raises a decode error."""
        mock_github.arequest.return_value = make_response({"unexpected": True})

        with pytest.raises(GitHubMalformedResponseError) as exc_info:
            await client.get_repository("chromium", "chromium")

        assert exc_info.value.stage == ErrorStage.DECODE

    async def test_invalid_json(self, client, mock_github):
        """A body that isn't JSON raises a decode error."""
        mock_github.arequest.return_value = make_response(raw=b"<html>oops</html>")

        with pytest.raises(GitHubMalformedResponseError):
            await client.get_repository("chromium", "chromium")

    async def test_exhausted_quota_403(self, client, mock_github):
        """A 403 with remaining=0 is reported as a rate limit error."""
        mock_github.arequest.side_effect = make_request_failed(
            403, rate_limit_headers(remaining=0)
        )

        with pytest.raises(GitHubRateLimitError) as exc_info:
            await client.get_repository("chromium", "chromium")

        assert exc_info.value.status_code == 403

    async def test_double_429_passes_through(self, client, mock_github):
        """The limiter's rate limit error is not re-wrapped."""
        mock_github.arequest.side_effect = [make_request_failed(429), make_request_failed(429)]

        with patch("github_monitor.github.rate_limiter.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(GitHubRateLimitError):
                await client.get_repository("chromium", "chromium")

        assert mock_github.arequest.await_count == 2

    async def test_updates_rate_limiter(self, client, mock_github, rate_limiter):
        """Response headers flow into the limiter."""
        mock_github.arequest.return_value = make_response(
            make_github_repository(), headers=rate_limit_headers(remaining=1234)
        )

        await client.get_repository("chromium", "chromium")

        assert rate_limiter.remaining == 1234


# -----------------------------------------------------------------------------
# Test: list_commits_since
# -----------------------------------------------------------------------------
class TestListCommitsSince:
    """Tests for commit pagination."""

    async def test_follows_link_header_until_no_next(self, client, mock_github):
        """100 commits with a next link, then 37 without: 137 commits, 2 calls."""
        mock_github.arequest.side_effect = [
            make_response(commit_page(0, 100), headers=LINK_PAGE_2),
            make_response(commit_page(100, 37)),
        ]

        commits = await client.list_commits_since("chromium", "chromium")

        assert len(commits) == 137
        assert mock_github.arequest.await_count == 2
        pages = [call.kwargs["params"]["page"] for call in mock_github.arequest.await_args_list]
        assert pages == [1, 2]
        assert all(
            call.kwargs["params"]["per_page"] == 100
            for call in mock_github.arequest.await_args_list
        )

    async def test_stops_on_empty_page(self, client, mock_github):
        """An empty page ends pagination even if a next link is present."""
        mock_github.arequest.side_effect = [
            make_response(commit_page(0, 100), headers=LINK_PAGE_2),
            make_response([], headers={"link": next_link("chromium", "chromium", 3)}),
        ]

        commits = await client.list_commits_since("chromium", "chromium")

        assert len(commits) == 100
        assert mock_github.arequest.await_count == 2

    async def test_empty_repository(self, client, mock_github):
        """An empty first page returns no commits after one call."""
        mock_github.arequest.return_value = make_response([])

        commits = await client.list_commits_since("chromium", "chromium")

        assert commits == []
        mock_github.arequest.assert_awaited_once()

    async def test_explicit_page_fetches_one_page(self, client, mock_github):
        """With page=N only that page is requested."""
        mock_github.arequest.return_value = make_response(
            commit_page(0, 100), headers={"link": next_link("chromium", "chromium", 4)}
        )

        commits = await client.list_commits_since("chromium", "chromium", page=3)

        assert len(commits) == 100
        mock_github.arequest.assert_awaited_once()
        assert mock_github.arequest.await_args.kwargs["params"]["page"] == 3

    async def test_since_sent_on_every_page_as_utc(self, client, mock_github):
        """since is converted to RFC 3339 UTC and sent with each page."""
        mock_github.arequest.side_effect = [
            make_response(commit_page(0, 100), headers=LINK_PAGE_2),
            make_response(commit_page(100, 1)),
        ]
        since = datetime(2024, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        await client.list_commits_since("chromium", "chromium", since)

        for call in mock_github.arequest.await_args_list:
            assert call.kwargs["params"]["since"] == "2024-01-15T10:00:00Z"

    async def test_since_omitted_when_none(self, client, mock_github):
        """No watermark means no since parameter."""
        mock_github.arequest.return_value = make_response(commit_page(0, 3))

        await client.list_commits_since("chromium", "chromium", None)

        assert "since" not in mock_github.arequest.await_args.kwargs["params"]

    async def test_commit_fields_parsed(self, client, mock_github):
        """Commit payloads decode with git author data."""
        mock_github.arequest.return_value = make_response(
            [make_github_commit("abc123", author_name="Bob", login=None, message="Line 1\n\nBody")]
        )

        [commit] = await client.list_commits_since("chromium", "chromium")

        assert commit.sha == "abc123"
        assert commit.author is None
        assert commit.commit.author.name == "Bob"
        assert commit.commit.message == "Line 1\n\nBody"
        assert commit.commit.author.date == datetime(2024, 1, 15, 10, 0, tzinfo=UTC)

    async def test_error_on_second_page_propagates(self, client, mock_github):
        """A failure mid-pagination fails the whole listing."""
        mock_github.arequest.side_effect = [
            make_response(commit_page(0, 100), headers=LINK_PAGE_2),
            make_request_failed(500),
        ]

        with pytest.raises(GitHubTransientError):
            await client.list_commits_since("chromium", "chromium")

    async def test_malformed_commit_page(self, client, mock_github):
        """A page that isn't a list of commits raises a decode error."""
        mock_github.arequest.return_value = make_response({"message": "not a list"})

        with pytest.raises(GitHubMalformedResponseError):
            await client.list_commits_since("chromium", "chromium")


# -----------------------------------------------------------------------------
# Test: get_rate_limit
# -----------------------------------------------------------------------------
class TestGetRateLimit:
    """Tests for the quota probe."""

    async def test_returns_refreshed_snapshot(self, client, mock_github):
        """The snapshot reflects the probe's headers."""
        mock_github.arequest.return_value = make_response(
            {"resources": {}}, headers=rate_limit_headers(remaining=4100)
        )

        snapshot = await client.get_rate_limit()

        assert snapshot.remaining == 4100
        mock_github.arequest.assert_awaited_once_with("GET", "/rate_limit", params=None)
