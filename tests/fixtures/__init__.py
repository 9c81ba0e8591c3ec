"""Test fixtures for GitHub Monitor."""

from .github_responses import (
    make_request_failed,
    make_response,
    next_link,
    rate_limit_headers,
)

__all__ = [
    "make_request_failed",
    "make_response",
    "next_link",
    "rate_limit_headers",
]
