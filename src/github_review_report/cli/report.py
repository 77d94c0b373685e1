"""Report commands: search, reviews, credits."""

import json
from typing import Annotated

import typer
from rich.table import Table

from github_review_report.cli.common import (
    AuthTokenOption,
    OutputFormat,
    OutputFormatOption,
    OwnerOption,
    PRNumberOption,
    RefreshCacheOption,
    RepoOption,
    console,
    fail,
    parse_date,
    require_token,
    run_command,
)
from github_review_report.config import ReportConfig, get_settings
from github_review_report.github import FetchResult, GitHubClient
from github_review_report.report import (
    CreditReportService,
    FileRepoNameCache,
    ReportRun,
    ResultWriter,
    ReviewListingService,
    resolve_repositories,
    run_search,
    scoped_query,
)


def search(
    ctx: typer.Context,
    query: Annotated[
        str,
        typer.Argument(help='GitHub search query, e.g. "is:pr author:octocat"'),
    ],
    authtoken: AuthTokenOption = None,
    owner: Annotated[
        str | None,
        typer.Option("--owner", "-o", help="Restrict the query to this user or organization."),
    ] = None,
) -> None:
    """Search issues and pull requests, oldest first.

    Prints URL, creation time, number, author and title per result.

    Examples:
        ghreport search "is:pr is:open"
        ghreport search "is:issue label:bug" --owner m-lab
    """
    token = require_token(ctx, authtoken)
    settings = get_settings()
    full_query = scoped_query(query, owner)

    def _search() -> FetchResult[str]:
        with GitHubClient(token) as client:
            return run_search(client, full_query, per_page=settings.report.search_per_page)

    result = run_command(_search, error_prefix="Search failed")
    for line in result.results:
        typer.echo(line)

    if result.error is not None:
        raise fail(f"search stopped at page {result.failed_page}: {result.error}")


def reviews(
    ctx: typer.Context,
    owner: OwnerOption,
    authtoken: AuthTokenOption = None,
    repo: RepoOption = None,
    pr_number: PRNumberOption = None,
    refresh_cache: RefreshCacheOption = False,
) -> None:
    """List every review on closed pull requests.

    One line per review: quota remaining, repository, PR number, author,
    reviewer, submission time. Without --repo every repository of the
    account is listed (cached between runs).

    Examples:
        ghreport reviews --owner m-lab --repo prometheus-support
        ghreport reviews --owner m-lab --repo ndt-server --pr 42
    """
    token = require_token(ctx, authtoken)
    config = ReportConfig.from_settings(
        get_settings(), owner=owner, repo=repo, pr_number=pr_number
    )

    def _reviews() -> ReportRun:
        with GitHubClient(token) as client:
            repositories = resolve_repositories(
                client,
                config,
                FileRepoNameCache(config.repo_cache_file),
                refresh=refresh_cache,
            )
            return ReviewListingService(client, config).run(repositories)

    run = run_command(_reviews, error_prefix="Review listing failed")
    for report in run.repo_reports:
        for line in report.lines:
            typer.echo(line)

    if run.error is not None:
        raise fail(str(run.error))


def credits(
    ctx: typer.Context,
    owner: OwnerOption,
    authtoken: AuthTokenOption = None,
    repo: RepoOption = None,
    pr_number: PRNumberOption = None,
    since: Annotated[
        str | None,
        typer.Option("--since", help="Skip PRs merged before this date (YYYY-MM-DD or ISO)."),
    ] = None,
    results_dir: Annotated[
        str | None,
        typer.Option("--results-dir", help="Directory for per-repository credit files."),
    ] = None,
    refresh_cache: RefreshCacheOption = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Credit approving reviewers of merged pull requests.

    Writes one file per repository under the results directory with a
    line per credited reviewer (or LGTM commenter when a PR has no
    approving review). Files are overwritten on each run.

    Examples:
        ghreport credits --owner m-lab
        ghreport credits --owner m-lab --repo ndt-server --since 2024-01-01
        ghreport credits --owner m-lab --repo ndt-server --pr 42 --format json
    """
    token = require_token(ctx, authtoken)
    overrides: dict[str, object] = {
        "owner": owner,
        "repo": repo,
        "pr_number": pr_number,
        "since": parse_date(since),
    }
    if results_dir is not None:
        overrides["results_dir"] = results_dir
    config = ReportConfig.from_settings(get_settings(), **overrides)

    def _credits() -> ReportRun:
        with GitHubClient(token) as client:
            repositories = resolve_repositories(
                client,
                config,
                FileRepoNameCache(config.repo_cache_file),
                refresh=refresh_cache,
            )
            service = CreditReportService(client, config, ResultWriter(config.results_dir))
            return service.run(repositories)

    run = run_command(_credits, error_prefix="Credit report failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(run.to_dict()))
    else:
        _print_credit_summary(run)

    if run.error is not None:
        raise fail(str(run.error))


def _print_credit_summary(run: ReportRun) -> None:
    if not run.repo_reports:
        return

    table = Table(title="Review credits")
    table.add_column("Repository", style="cyan")
    table.add_column("PRs", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Credits", justify="right")
    table.add_column("File")

    for report in run.repo_reports:
        table.add_row(
            report.repository,
            str(report.pulls_seen),
            str(report.skipped),
            str(len(report.lines)),
            str(report.path) if report.path else "-",
        )

    console.print(table)
    console.print(f"[green]{run.total_lines} credits[/green] in {len(run.repo_reports)} repositories")
