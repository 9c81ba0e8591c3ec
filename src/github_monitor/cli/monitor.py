"""Long-running monitor command."""

import asyncio
import signal

import typer

from github_monitor.cli.common import console, run_async_command, sync_service, validate_repo
from github_monitor.db import create_tables
from github_monitor.errors import RepositoryAlreadyMonitoredError
from github_monitor.github import MonitorSupervisor
from github_monitor.logging import get_logger

app = typer.Typer(help="Continuously monitor repositories")
logger = get_logger(__name__)


@app.command("run")
def run_monitor(
    add: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--add",
        "-a",
        help="Repository to start monitoring (owner/name, repeatable)",
    ),
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        min=1,
        help="Seconds between syncs (default: SYNC__INTERVAL_SECONDS or 3600)",
    ),
) -> None:
    """Sync every stored repository on an interval until interrupted.

    On an empty database the default repository is synced first.
    Stop with Ctrl+C (SIGINT) or SIGTERM; running syncs are allowed
    to finish.

    Examples:
        ghmonitor monitor run
        ghmonitor monitor run --add octocat/hello-world --interval 600
    """
    to_add = [validate_repo(repo) for repo in add or []]

    async def _run() -> None:
        await create_tables()
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)

        async with sync_service() as service:
            supervisor = MonitorSupervisor(service, interval=interval, stop_event=stop_event)
            try:
                monitored = await supervisor.bootstrap()
                for owner, name in to_add:
                    try:
                        result = await supervisor.add_repository(owner, name)
                    except RepositoryAlreadyMonitoredError:
                        logger.info("{repo} is already monitored", repo=f"{owner}/{name}")
                        continue
                    monitored.append(result.repository)

                console.print(f"[green]Monitoring {len(monitored)} repositories[/green]")
                for full_name in monitored:
                    console.print(f"  - {full_name}")
                await supervisor.run_until_stopped()
            finally:
                await supervisor.shutdown()

        console.print("[dim]Monitor stopped[/dim]")

    run_async_command(_run(), error_prefix="Monitor failed")
