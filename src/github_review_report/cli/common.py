"""Common CLI option types and helpers.

This module centralizes reusable CLI options and consolidates the
error handling every API command shares:

- `run_command`: run report code, turning any error into exit code 1
- `require_token`: resolve the auth token or print usage and exit
- Option type aliases for the account/repository/PR flags
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, TypeVar

import typer
from rich.console import Console

from github_review_report.config import get_settings

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output format for command summaries."""

    TEXT = "text"
    JSON = "json"


def run_command(fn: Callable[[], T], *, error_prefix: str = "Error") -> T:
    """Run report code with unified error handling.

    Catches any error, prints a one-line message and exits with code 1.
    Deliberate exits pass through.

    Example:
        def _search() -> FetchResult[str]:
            with GitHubClient(token) as client:
                return run_search(client, query)

        result = run_command(_search, error_prefix="Search failed")
    """
    try:
        return fn()
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}", highlight=False)
        raise typer.Exit(1) from None


def fail(message: str) -> typer.Exit:
    """Print an error line and return the Exit to raise."""
    console.print(f"[red]Error:[/red] {message}", highlight=False)
    return typer.Exit(1)


def require_token(ctx: typer.Context, token: str | None) -> str:
    """Resolve the GitHub token from the flag, environment or settings.

    Prints the command usage and exits with code 1 when none is set.
    """
    token = token or get_settings().github_token
    if not token:
        typer.echo(ctx.get_usage(), err=True)
        raise fail("a GitHub token is required (--authtoken or GITHUB_TOKEN)")
    return token


def parse_date(date_str: str | None) -> datetime | None:
    """Parse a date string into a UTC datetime.

    Supports formats:
    - YYYY-MM-DD
    - YYYY-MM-DDTHH:MM:SS
    - ISO format with timezone

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
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=UTC)
            return dt
        except ValueError:
            continue

    raise typer.BadParameter(
        f"Invalid date format: {date_str}. Use YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS format."
    )


# -----------------------------------------------------------------------------
# Option Types
# -----------------------------------------------------------------------------
# Annotated aliases keep the option definitions shared by every command
# in one place.

AuthTokenOption = Annotated[
    str | None,
    typer.Option(
        "--authtoken",
        "-t",
        envvar="GITHUB_TOKEN",
        show_envvar=True,
        help="OAuth2 token for access to the GitHub API.",
    ),
]

OwnerOption = Annotated[
    str,
    typer.Option(
        "--owner",
        "-o",
        help="The GitHub user or organization name.",
    ),
]

RepoOption = Annotated[
    str | None,
    typer.Option(
        "--repo",
        "-r",
        help="Only process this repository (name under --owner).",
    ),
]

PRNumberOption = Annotated[
    int | None,
    typer.Option(
        "--pr",
        "-p",
        min=1,
        help="Only process the pull request with this number.",
    ),
]

RefreshCacheOption = Annotated[
    bool,
    typer.Option(
        "--refresh-cache",
        help="Ignore the cached repository list and list the account again.",
    ),
]

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Summary output format",
    ),
]
