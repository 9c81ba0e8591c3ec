"""GitHub API verification commands."""

from datetime import UTC, datetime

import typer

from github_monitor.cli.common import (
    OutputFormatOption,
    console,
    print_json,
    run_async_command,
)
from github_monitor.github import GitHubClient, OutputFormat, QuotaSnapshot

app = typer.Typer(help="GitHub API commands")


def _format_time_remaining(seconds: int) -> str:
    """Format seconds as human-readable time."""
    if seconds <= 0:
        return "Now"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


@app.command("rate-limit")
def show_rate_limit(
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show current GitHub API rate limit status.

    Examples:
        ghmonitor github rate-limit
        ghmonitor github rate-limit --format json
    """

    async def _check() -> QuotaSnapshot:
        async with GitHubClient() as client:
            return await client.get_rate_limit()

    snapshot = run_async_command(_check(), output_format=output_format)

    if output_format == OutputFormat.JSON:
        print_json(snapshot.to_dict())
        return

    seconds_left = int((snapshot.reset_at - datetime.now(UTC)).total_seconds())
    if snapshot.is_exhausted:
        status = "[bold red]EXHAUSTED[/bold red]"
    elif snapshot.is_low:
        status = "[yellow]LOW[/yellow]"
    else:
        status = "[green]OK[/green]"

    console.print(f"[bold]GitHub API quota:[/bold] {status}")
    console.print(f"  Remaining: {snapshot.remaining}")
    console.print(
        f"  Resets at: {snapshot.reset_at:%Y-%m-%d %H:%M:%S UTC} "
        f"(in {_format_time_remaining(seconds_left)})"
    )
    if snapshot.is_low:
        console.print(
            f"\n[yellow]Recommendation:[/yellow] Fewer than {snapshot.low_quota_warning} "
            "requests left. Consider waiting before syncing large repositories."
        )
