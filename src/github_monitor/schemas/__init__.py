"""Pydantic schemas for GitHub Monitor.

This module provides input validation and output serialization models.
"""

from .base import SchemaBase, UTCDateTime, ensure_utc
from .commit import AuthorCommitCount, CommitCreate, CommitRead
from .github_api import (
    GitHubCommit,
    GitHubCommitAuthor,
    GitHubCommitDetail,
    GitHubCommitList,
    GitHubRepository,
    GitHubUser,
)
from .repository import RepositoryRead, RepositoryUpsert, parse_repo_string

__all__ = [
    # Base
    "SchemaBase",
    "UTCDateTime",
    "ensure_utc",
    # Commits
    "AuthorCommitCount",
    "CommitCreate",
    "CommitRead",
    # GitHub API
    "GitHubCommit",
    "GitHubCommitAuthor",
    "GitHubCommitDetail",
    "GitHubCommitList",
    "GitHubRepository",
    "GitHubUser",
    # Repository
    "RepositoryRead",
    "RepositoryUpsert",
    "parse_repo_string",
]
