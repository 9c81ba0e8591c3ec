"""Common CLI option factories and helpers.

This module centralizes reusable CLI options to reduce duplication
and consolidate noqa comments for Typer's required function call pattern.

It also provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- `sync_service`: Wiring of client, limiter and gateway for sync commands
- Repository argument type aliases for consistent repo input handling
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console

from github_monitor.db import PersistenceGateway, dispose_engine
from github_monitor.errors import MonitorError, error_response
from github_monitor.github import GitHubClient, OutputFormat, SyncService
from github_monitor.schemas import parse_repo_string

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
    output_format: OutputFormat = OutputFormat.TEXT,
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management and disposes the
    database engine afterwards. Application errors are printed as their
    structured error response; the command exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")
        output_format: Print errors as JSON when JSON output was requested

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error

    Example:
        async def _show() -> RepositoryRead:
            return await PersistenceGateway().get_repository("chromium/chromium")

        repo = run_async_command(_show(), error_prefix="Lookup failed")
    """
    try:
        return asyncio.run(_dispose_after(coro))
    except typer.Exit:
        # Re-raise deliberate exits (e.g., from validation helpers)
        raise
    except MonitorError as e:
        print_error(e, error_prefix=error_prefix, output_format=output_format)
        raise typer.Exit(1) from None
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


async def _dispose_after(coro: Coroutine[object, object, T]) -> T:
    try:
        return await coro
    finally:
        await dispose_engine()


def print_error(
    error: MonitorError,
    *,
    error_prefix: str = "Error",
    output_format: OutputFormat = OutputFormat.TEXT,
) -> None:
    """Print an application error as text or as its JSON error response."""
    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(error_response(error)))
        return
    console.print(f"[red]{error_prefix}:[/red] {error.title} [dim]({error.reference})[/dim]")
    if error.detail:
        console.print(f"  {error.detail}")


def print_json(data: Any) -> None:
    """Print JSON-serializable data."""
    console.print_json(json.dumps(data))


@asynccontextmanager
async def sync_service() -> AsyncIterator[SyncService]:
    """Build a SyncService backed by a fresh client and the default database."""
    async with GitHubClient() as client:
        yield SyncService(client, PersistenceGateway())


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

# -----------------------------------------------------------------------------
# Repository Argument Factories
# -----------------------------------------------------------------------------

RepoArgument = Annotated[
    str,
    typer.Argument(
        help="Repository in owner/name format (e.g., chromium/chromium)",
    ),
]
"""Required positional repository argument.

Usage:
    def show(repo: RepoArgument) -> None:
"""


# -----------------------------------------------------------------------------
# Validation Helpers
# -----------------------------------------------------------------------------


def validate_repo(repo: str) -> tuple[str, str]:
    """Parse and validate a single repository string.

    Args:
        repo: Repository string in owner/name format

    Returns:
        Tuple of (owner, name)

    Raises:
        typer.Exit(1): If format is invalid
    """
    try:
        return parse_repo_string(repo)
    except ValueError:
        console.print("[red]Error:[/red] Repository must be in owner/name format")
        raise typer.Exit(1) from None


def parse_date(date_str: str | None, *, end_of_day: bool = False) -> datetime | None:
    """Parse a date string into a datetime object.

    Supports formats:
    - YYYY-MM-DD
    - YYYY-MM-DDTHH:MM:SS
    - ISO format with timezone

    Args:
        date_str: Date string to parse, or None
        end_of_day: Resolve a bare YYYY-MM-DD to its last microsecond instead
            of midnight, for inclusive upper bounds

    Returns:
        datetime object with UTC timezone, or None if input was None

    Raises:
        typer.BadParameter: If the date string is invalid
    """
    if date_str is None:
        return None

    formats = [
        "%Y-%m-%d",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S%z",
    ]

    for fmt in formats:
        try:
            dt = datetime.strptime(date_str, fmt)
        except ValueError:
            continue
        if end_of_day and fmt == "%Y-%m-%d":
            dt = dt.replace(hour=23, minute=59, second=59, microsecond=999999)
        if dt.tzinfo is None:
            return dt.replace(tzinfo=UTC)
        return dt.astimezone(UTC)

    raise typer.BadParameter(
        f"Invalid date format: {date_str}. "
        "Use YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS format."
    )


def validate_date(date_str: str | None, *, end_of_day: bool = False) -> datetime | None:
    """Parse a date option, exiting with code 1 on bad input."""
    try:
        return parse_date(date_str, end_of_day=end_of_day)
    except typer.BadParameter as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
