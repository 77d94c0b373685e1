"""Main CLI application for GitHub review reports."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from github_review_report import __version__
from github_review_report.cli import github as github_cmd
from github_review_report.cli import report as report_cmd
from github_review_report.config import get_settings
from github_review_report.logging import setup_logging

app = typer.Typer(
    name="ghreport",
    help="Report on GitHub issues, pull requests and reviews.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ghreport version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """ghreport - search issues and report on pull request reviews."""
    settings = get_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


# Register commands
app.command("search")(report_cmd.search)
app.command("reviews")(report_cmd.reviews)
app.command("credits")(report_cmd.credits)
app.add_typer(github_cmd.app, name="github")


if __name__ == "__main__":
    app()
