"""Issue search report: one line per matching issue or pull request."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

from github_review_report.github import (
    FetchResult,
    GitHubClient,
    PaginatedFetcher,
    Success,
)
from github_review_report.schemas import GitHubIssue

from .formatting import rfc3339


def format_issue_line(issue: GitHubIssue) -> str:
    """URL, creation time, number, author and title in fixed-width columns."""
    return (
        f"{issue.html_url:<55} {rfc3339(issue.created_at)} "
        f"{issue.number:>3} {issue.author:<15} {issue.title}"
    )


def scoped_query(query: str, owner: str | None) -> str:
    """Restrict a search query to one account unless it already names one."""
    if not owner or "user:" in query or "org:" in query or "repo:" in query:
        return query
    return f"{query} user:{owner}".strip()


def run_search(
    client: GitHubClient,
    query: str,
    *,
    per_page: int = 100,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], datetime] | None = None,
) -> FetchResult[str]:
    """Search issues oldest first and format every result.

    Returns:
        FetchResult whose results are the formatted lines
    """
    fetcher: PaginatedFetcher[GitHubIssue, str] = PaginatedFetcher(
        lambda page: client.search_issues_page(
            query, page=page, per_page=per_page, sort="created", order="asc"
        ),
        lambda issue: Success(format_issue_line(issue)),
        label="search",
        sleep=sleep,
        clock=clock,
    )
    return fetcher.run()
