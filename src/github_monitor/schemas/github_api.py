"""Pydantic schemas for parsing GitHub API responses.

These schemas map directly to the GitHub REST API response structure.
See: https://docs.github.com/en/rest/repos/repos#get-a-repository
     https://docs.github.com/en/rest/commits/commits#list-commits
"""

from datetime import datetime

from pydantic import BaseModel, Field, TypeAdapter

from .commit import CommitCreate
from .repository import RepositoryUpsert


class GitHubUser(BaseModel):
    """GitHub user object from API responses."""

    login: str = Field(description="GitHub username")
    id: int | None = Field(default=None, description="GitHub user ID")


class GitHubRepository(BaseModel):
    """GitHub repository object.

    Maps to: GET /repos/{owner}/{repo}
    """

    full_name: str = Field(description="owner/name")
    description: str | None = Field(default=None, description="Repository description")
    html_url: str = Field(description="Repository URL")
    language: str | None = Field(default=None, description="Primary language")
    forks_count: int = Field(default=0, description="Number of forks")
    stargazers_count: int = Field(default=0, description="Number of stars")
    open_issues_count: int = Field(default=0, description="Open issues and PRs")
    watchers_count: int = Field(default=0, description="Number of watchers")
    created_at: datetime | None = Field(default=None, description="When repository was created")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")

    def to_repository_upsert(self) -> RepositoryUpsert:
        """
        Factory method to convert to the RepositoryUpsert schema.

        Returns:
            RepositoryUpsert keyed by the full repository name
        """
        return RepositoryUpsert(
            name=self.full_name,
            description=self.description,
            url=self.html_url,
            language=self.language,
            forks_count=self.forks_count,
            stars_count=self.stargazers_count,
            open_issues_count=self.open_issues_count,
            watchers_count=self.watchers_count,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class GitHubCommitAuthor(BaseModel):
    """Commit author info (from git, not GitHub user)."""

    name: str | None = Field(default=None, description="Author name")
    email: str | None = Field(default=None, description="Author email")
    date: datetime = Field(description="Commit date (UTC)")


class GitHubCommitDetail(BaseModel):
    """Nested commit detail object."""

    author: GitHubCommitAuthor = Field(description="Commit author info")
    message: str = Field(description="Commit message")


class GitHubCommit(BaseModel):
    """GitHub commit object from the list commits endpoint.

    Maps to: GET /repos/{owner}/{repo}/commits
    """

    sha: str = Field(description="Commit SHA")
    html_url: str = Field(description="Commit URL")
    commit: GitHubCommitDetail = Field(description="Commit details")
    author: GitHubUser | None = Field(
        default=None, description="Linked GitHub account (null when unmatched)"
    )

    def to_commit_create(self, repository_id: int) -> CommitCreate:
        """
        Factory method to convert to CommitCreate schema.

        Args:
            repository_id: ID of the repository this commit belongs to

        Returns:
            CommitCreate instance
        """
        return CommitCreate(
            sha=self.sha,
            repository_id=repository_id,
            message=self.commit.message,
            author_name=self.commit.author.name,
            author_email=self.commit.author.email,
            author_date=self.commit.author.date,
            commit_url=self.html_url,
        )


GitHubCommitList = TypeAdapter(list[GitHubCommit])
"""Validator for a page of commits (JSON array)."""
