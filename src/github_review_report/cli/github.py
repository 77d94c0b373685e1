"""GitHub API verification commands."""

import typer
from rich.table import Table

from github_review_report.cli.common import AuthTokenOption, console, require_token, run_command
from github_review_report.github import (
    GitHubClient,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
    TokenInfo,
)

app = typer.Typer(help="GitHub API commands")


def _get_status_style(status: RateLimitStatus) -> str:
    """Get rich style for status."""
    match status:
        case RateLimitStatus.HEALTHY:
            return "[green]HEALTHY[/green]"
        case RateLimitStatus.WARNING:
            return "[yellow]WARNING[/yellow]"
        case RateLimitStatus.CRITICAL:
            return "[red]CRITICAL[/red]"
        case RateLimitStatus.EXHAUSTED:
            return "[bold red]EXHAUSTED[/bold red]"
        case _:
            return str(status)


def format_time_remaining(seconds: int) -> str:
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
    ctx: typer.Context,
    authtoken: AuthTokenOption = None,
    all_pools: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Show all rate limit pools (not just core and search)",
    ),
) -> None:
    """Show current GitHub API rate limit status.

    Examples:
        ghreport github rate-limit
        ghreport github rate-limit --all
    """
    token = require_token(ctx, authtoken)

    def _check() -> RateLimitSnapshot:
        with GitHubClient(token) as client:
            return client.get_rate_limit()

    snapshot = run_command(_check, error_prefix="Rate limit check failed")

    core = snapshot.get_core()
    if core is not None:
        token_info = TokenInfo.from_rate_limit(core.limit)
        if token_info.is_pat:
            console.print("[green]✓[/green] Authenticated with PAT (5,000 requests/hour)")
        else:
            console.print("[yellow]⚠[/yellow] Unauthenticated or limited token (60 requests/hour)")

    pools: list[RateLimitPool] = (
        list(RateLimitPool) if all_pools else [RateLimitPool.CORE, RateLimitPool.SEARCH]
    )

    table = Table(title="GitHub API Rate Limits")
    table.add_column("Pool", style="bold")
    table.add_column("Status")
    table.add_column("Remaining", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Resets In", justify="right")

    for pool in pools:
        pool_limit = snapshot.get_pool(pool)
        if pool_limit is None:
            continue
        table.add_row(
            pool.value,
            _get_status_style(pool_limit.get_status()),
            str(pool_limit.remaining),
            str(pool_limit.limit),
            format_time_remaining(int(pool_limit.seconds_until_reset())),
        )

    console.print()
    console.print(table)

    if core is not None and core.is_exhausted:
        console.print(
            f"\n[red]Rate limit exhausted![/red] Reports will sleep "
            f"{format_time_remaining(int(core.seconds_until_reset()))} before continuing."
        )
