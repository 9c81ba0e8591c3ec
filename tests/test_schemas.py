"""Tests for Pydantic schemas."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from github_monitor.schemas import (
    CommitCreate,
    GitHubCommit,
    GitHubRepository,
    RepositoryRead,
    ensure_utc,
    parse_repo_string,
)
from tests.conftest import JAN_10, JAN_15, JAN_16
from tests.factories import make_commit_create, make_github_commit, make_github_repository


class TestEnsureUtc:
    """Tests for ensure_utc."""

    def test_naive_is_treated_as_utc(self):
        assert ensure_utc(datetime(2024, 1, 15, 10, 0)) == JAN_15

    def test_offset_is_converted(self):
        value = datetime(2024, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))

        result = ensure_utc(value)

        assert result == JAN_15
        assert result.tzinfo == UTC

    def test_utc_unchanged(self):
        assert ensure_utc(JAN_15) == JAN_15


class TestParseRepoString:
    """Tests for parse_repo_string."""

    def test_valid(self):
        assert parse_repo_string("chromium/chromium") == ("chromium", "chromium")

    def test_strips_whitespace(self):
        assert parse_repo_string("  python/cpython ") == ("python", "cpython")

    @pytest.mark.parametrize("value", ["chromium", "a/b/c", "/name", "owner/", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="owner/name"):
            parse_repo_string(value)


class TestGitHubRepository:
    """Tests for the repository API schema."""

    def test_to_repository_upsert(self):
        repo = GitHubRepository.model_validate(make_github_repository())

        upsert = repo.to_repository_upsert()

        assert upsert.name == "chromium/chromium"
        assert upsert.url == "https://github.com/chromium/chromium"
        assert upsert.stars_count == 19000
        assert upsert.created_at == JAN_10
        assert upsert.updated_at == JAN_16

    def test_null_description_and_language(self):
        repo = GitHubRepository.model_validate(
            make_github_repository(description=None, language=None)
        )

        upsert = repo.to_repository_upsert()

        assert upsert.description is None
        assert upsert.language is None

    def test_missing_required_field(self):
        data = make_github_repository()
        del data["html_url"]

        with pytest.raises(ValidationError):
            GitHubRepository.model_validate(data)


class TestGitHubCommit:
    """Tests for the commit API schema."""

    def test_to_commit_create_uses_git_author(self):
        """The git author name is stored, not the GitHub login."""
        commit = GitHubCommit.model_validate(
            make_github_commit("abc", author_name="Alice Example", login="alice")
        )

        create = commit.to_commit_create(repository_id=7)

        assert create.sha == "abc"
        assert create.repository_id == 7
        assert create.author_name == "Alice Example"
        assert create.author_email == "alice example@example.com"
        assert create.author_date == JAN_15
        assert create.commit_url == "https://github.com/chromium/chromium/commit/abc"

    def test_unlinked_author(self):
        """Commits without a GitHub account still convert."""
        commit = GitHubCommit.model_validate(make_github_commit("abc", login=None))

        assert commit.author is None
        assert commit.to_commit_create(1).author_name == "Alice"

    def test_message_kept_verbatim(self):
        commit = GitHubCommit.model_validate(
            make_github_commit("abc", message="  Subject\n\nBody  \n")
        )

        assert commit.to_commit_create(1).message == "  Subject\n\nBody  \n"


class TestCommitCreate:
    """Tests for CommitCreate validation."""

    def test_empty_sha_rejected(self):
        with pytest.raises(ValidationError):
            make_commit_create(1, "")

    def test_author_date_normalised(self):
        local = datetime(2024, 1, 15, 5, 0, tzinfo=timezone(timedelta(hours=-5)))

        create = make_commit_create(1, "abc", author_date=local)

        assert create.author_date == JAN_15
        assert create.author_date.tzinfo == UTC

    def test_naive_author_date(self):
        create = CommitCreate(
            sha="abc",
            repository_id=1,
            message="m",
            author_date=datetime(2024, 1, 15, 10, 0),
            commit_url="https://github.com/a/b/commit/abc",
        )

        assert create.author_date == JAN_15


class TestRepositoryRead:
    """Tests for RepositoryRead."""

    def test_owner_and_name(self):
        repo = RepositoryRead(
            id=1,
            name="chromium/chromium",
            description=None,
            url="https://github.com/chromium/chromium",
            language=None,
            forks_count=0,
            stars_count=0,
            open_issues_count=0,
            watchers_count=0,
            created_at=None,
            updated_at=None,
            last_commit_fetched_at=datetime(2024, 1, 16, 14, 0),
        )

        assert repo.owner_and_name == ("chromium", "chromium")
        assert repo.last_commit_fetched_at == JAN_16
