"""Repository query and maintenance commands."""

from typing import Annotated

import typer
from rich.table import Table

from github_monitor.cli.common import (
    OutputFormatOption,
    RepoArgument,
    console,
    print_json,
    run_async_command,
    sync_service,
    validate_date,
    validate_repo,
)
from github_monitor.db import PersistenceGateway
from github_monitor.github import MonitorSupervisor, OutputFormat, SyncResult
from github_monitor.schemas import AuthorCommitCount, CommitRead, RepositoryRead

app = typer.Typer(help="Query and manage stored repositories")


@app.command("show")
def show_repository(
    repo: RepoArgument,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show stored metadata for a repository.

    Examples:
        ghmonitor repo show chromium/chromium
        ghmonitor repo show chromium/chromium --format json
    """
    validate_repo(repo)

    async def _show() -> tuple[RepositoryRead, int]:
        gateway = PersistenceGateway()
        repository = await gateway.get_repository(repo)
        return repository, await gateway.count_commits(repository.name)

    repository, commit_count = run_async_command(_show(), output_format=output_format)

    if output_format == OutputFormat.JSON:
        print_json({**repository.model_dump(mode="json"), "commit_count": commit_count})
        return

    console.print(f"[bold]{repository.name}[/bold]")
    if repository.description:
        console.print(f"  {repository.description}")
    console.print()
    console.print(f"  URL:        {repository.url}")
    console.print(f"  Language:   {repository.language or '-'}")
    console.print(f"  Stars:      {repository.stars_count}")
    console.print(f"  Forks:      {repository.forks_count}")
    console.print(f"  Watchers:   {repository.watchers_count}")
    console.print(f"  Open issues: {repository.open_issues_count}")
    console.print(f"  Commits:    {commit_count} stored")
    fetched = repository.last_commit_fetched_at
    console.print(f"  Last fetch: {fetched.isoformat() if fetched else 'never'}")


@app.command("commits")
def list_commits(
    repo: RepoArgument,
    since: str | None = typer.Option(
        None,
        "--since",
        help="Only commits authored at or after this date (YYYY-MM-DD or ISO format)",
    ),
    until: str | None = typer.Option(
        None,
        "--until",
        help="Only commits authored at or before this date; a bare date covers the whole day",
    ),
    page: Annotated[int, typer.Option("--page", "-p", min=1, help="Page number")] = 1,
    limit: Annotated[
        int, typer.Option("--limit", "-l", min=1, max=100, help="Commits per page")
    ] = 30,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """List stored commits of a repository, newest first.

    Examples:
        ghmonitor repo commits chromium/chromium
        ghmonitor repo commits chromium/chromium --since 2024-01-01 --page 2
    """
    validate_repo(repo)
    since_dt = validate_date(since)
    until_dt = validate_date(until, end_of_day=True)

    async def _commits() -> list[CommitRead]:
        return await PersistenceGateway().get_commits(repo, since=since_dt, until=until_dt)

    commits = run_async_command(_commits(), output_format=output_format)
    start = (page - 1) * limit
    page_commits = commits[start : start + limit]

    if output_format == OutputFormat.JSON:
        print_json(
            {
                "repository": repo,
                "page": page,
                "limit": limit,
                "total": len(commits),
                "commits": [c.model_dump(mode="json") for c in page_commits],
            }
        )
        return

    if not page_commits:
        console.print("[yellow]No commits found.[/yellow]")
        return

    table = Table(title=f"Commits in {repo} (page {page}, {len(commits)} total)")
    table.add_column("SHA", style="cyan")
    table.add_column("Author")
    table.add_column("Date")
    table.add_column("Message", max_width=60)

    for commit in page_commits:
        summary = commit.message.splitlines()[0] if commit.message else ""
        table.add_row(
            commit.sha[:10],
            commit.author_name or "-",
            commit.author_date.strftime("%Y-%m-%d %H:%M"),
            summary,
        )
    console.print(table)


@app.command("top-authors")
def top_authors(
    repo: RepoArgument,
    limit: Annotated[
        int, typer.Option("--limit", "-l", min=1, max=100, help="Number of authors")
    ] = 10,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show the authors with the most stored commits.

    Examples:
        ghmonitor repo top-authors chromium/chromium --limit 5
    """
    validate_repo(repo)

    async def _authors() -> list[AuthorCommitCount]:
        return await PersistenceGateway().get_top_authors(repo, limit)

    authors = run_async_command(_authors(), output_format=output_format)

    if output_format == OutputFormat.JSON:
        print_json([a.model_dump(mode="json") for a in authors])
        return

    table = Table(title=f"Top authors in {repo}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Author")
    table.add_column("Commits", justify="right")
    for rank, author in enumerate(authors, start=1):
        table.add_row(str(rank), author.author_name or "-", str(author.commit_count))
    console.print(table)


@app.command("reset")
def reset_repository(
    repo: RepoArgument,
    since: str = typer.Option(
        ...,
        "--since",
        help="New watermark; the next sync fetches commits after this date",
    ),
) -> None:
    """Delete stored commits and move the sync watermark.

    Examples:
        ghmonitor repo reset chromium/chromium --since 2024-01-01
    """
    validate_repo(repo)
    since_dt = validate_date(since)

    async def _reset() -> int:
        return await PersistenceGateway().reset_repository(repo, since_dt)

    deleted = run_async_command(_reset(), error_prefix="Reset failed")
    console.print(f"[green]Reset {repo}:[/green] deleted {deleted} commits")
    if since_dt is not None:
        console.print(f"  Next sync fetches commits after {since_dt.isoformat()}")


@app.command("sync")
def sync_repository(
    repo: RepoArgument,
    since: str | None = typer.Option(
        None,
        "--since",
        help="Only fetch commits after this date (default: full history)",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Run one sync of a repository from GitHub.

    Examples:
        ghmonitor repo sync chromium/chromium
        ghmonitor repo sync chromium/chromium --since 2024-10-01 --format json
    """
    owner, name = validate_repo(repo)
    since_dt = validate_date(since)

    async def _sync() -> SyncResult:
        async with sync_service() as service:
            return await MonitorSupervisor(service).monitor_since(owner, name, since_dt)

    if output_format == OutputFormat.TEXT:
        console.print(f"[dim]Syncing commits from {repo}...[/dim]")
        if since_dt:
            console.print(f"[dim]  Since: {since_dt.isoformat()}[/dim]")

    result = run_async_command(_sync(), error_prefix="Sync failed", output_format=output_format)

    if output_format == OutputFormat.JSON:
        print_json(result.to_dict())
        return

    console.print("[bold]Sync Complete[/bold]")
    console.print()
    console.print(f"  [green]New commits:[/green]   {result.commits_inserted}")
    console.print(f"  [dim]Already stored:[/dim] {result.commits_skipped}")
    console.print(f"  Fetched:        {result.commits_fetched}")
    if result.first_sync:
        console.print("  [blue]First sync of this repository[/blue]")
