"""Entry point for the ghmonitor command line.

Global flags configure logging once for every subcommand; the commands
themselves live in the repo, monitor and github modules.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from github_monitor import __version__
from github_monitor.cli import github as github_cmd
from github_monitor.cli import monitor as monitor_cmd
from github_monitor.cli import repo as repo_cmd
from github_monitor.cli.common import OutputFormatOption, console, print_json, run_async_command
from github_monitor.config import get_settings
from github_monitor.db import PersistenceGateway
from github_monitor.github import OutputFormat
from github_monitor.logging import setup_logging
from github_monitor.schemas import RepositoryRead

app = typer.Typer(
    name="ghmonitor",
    help="Track GitHub repositories and keep their commit history in a local database.",
    add_completion=False,
    no_args_is_help=True,
)


def _print_version(value: bool) -> None:
    if value:
        console.print(f"ghmonitor version {__version__}")
        raise typer.Exit()


@app.callback()
def configure(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug output.")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Only log warnings and errors.")
    ] = False,
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_print_version,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Sync GitHub repositories into a database and query their commits.

    Connection and token settings are read from the environment or .env
    (DATABASE_URL, GITHUB_TOKEN, DEFAULT_REPOSITORY, ...).
    """
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet cannot be combined")

    settings = get_settings()
    log_file = settings.logging.log_file
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_file) if log_file else None,
        rotation=settings.logging.rotation,
        retention=settings.logging.retention,
        serialize=settings.logging.serialize,
    )


@app.command("list")
def list_repositories(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """List monitored repositories with their stored commit counts.

    Examples:
        ghmonitor list
        ghmonitor list --format json
    """

    async def _list() -> list[tuple[RepositoryRead, int]]:
        gateway = PersistenceGateway()
        return [
            (repository, await gateway.count_commits(repository.name))
            for repository in await gateway.list_repositories()
        ]

    rows = run_async_command(_list(), output_format=output_format)

    if output_format == OutputFormat.JSON:
        print_json(
            [
                {
                    "name": repository.name,
                    "commit_count": count,
                    "last_commit_fetched_at": (
                        repository.last_commit_fetched_at.isoformat()
                        if repository.last_commit_fetched_at
                        else None
                    ),
                }
                for repository, count in rows
            ]
        )
        return

    if not rows:
        console.print("[yellow]No repositories monitored yet.[/yellow]")
        return

    table = Table(title="Monitored repositories")
    table.add_column("Repository", style="cyan")
    table.add_column("Commits", justify="right")
    table.add_column("Last fetch")
    for repository, count in rows:
        fetched = repository.last_commit_fetched_at
        table.add_row(
            repository.name,
            str(count),
            fetched.strftime("%Y-%m-%d %H:%M") if fetched else "never",
        )
    console.print(table)


app.add_typer(repo_cmd.app, name="repo")
app.add_typer(monitor_cmd.app, name="monitor")
app.add_typer(github_cmd.app, name="github")
