"""Per-repository pull request reports.

Runs a per-PR handler over the pull requests of each repository in turn,
using the paginated fetch loop. Repositories are processed in order; the
first fatal error stops the run and later repositories are not touched.
Lines gathered for the failing repository are kept in the run.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any, ClassVar, Generic, TypeVar

from github_review_report.config import ReportConfig
from github_review_report.github import (
    Fatal,
    FetchResult,
    GitHubClient,
    Outcome,
    PaginatedFetcher,
    RetryAfter,
    outcome_from_error,
)
from github_review_report.logging import bind_repo
from github_review_report.schemas import GitHubPullRequest

from .exceptions import ReportError
from .results import RepoReport, ReportRun

R = TypeVar("R")


def as_report_error(error: Exception, repository: str, page: int | None = None) -> ReportError:
    """Attach repository context to a fatal loop error."""
    if isinstance(error, ReportError):
        if error.repository is None:
            error.repository = repository
        return error
    message = f"{error} (page {page})" if page is not None else str(error)
    return ReportError(message, repository=repository)


class PullReportService(ABC, Generic[R]):
    """Base for reports driven by a repository's pull request listing.

    Subclasses provide the per-PR handler and decide what to do with a
    finished repository (print, write to a file, ...).
    """

    report_name: ClassVar[str] = "report"

    def __init__(
        self,
        client: GitHubClient,
        config: ReportConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._sleep = sleep
        self._clock = clock

    @abstractmethod
    def make_handler(self, repo: str) -> Callable[[GitHubPullRequest], Outcome[list[R]]]:
        """Build the per-PR handler for one repository."""

    @abstractmethod
    def finish_repository(self, repo: str, fetch: FetchResult[list[R]]) -> RepoReport:
        """Turn a completed fetch into the repository's report."""

    def partial_repository(self, repo: str, fetch: FetchResult[list[R]]) -> RepoReport:
        """Report for a repository whose fetch stopped at a fatal error.

        Holds the lines of the pull requests handled before the failure.
        Nothing is written to disk for it.
        """
        return RepoReport.from_fetch(repo, fetch, self.lines_for(fetch))

    def lines_for(self, fetch: FetchResult[list[R]]) -> list[str]:
        """Output lines for the results gathered so far."""
        return [str(value) for value in flatten(fetch.results)]

    def sub_fetch_failed(self, error: Exception, repo: str, number: int) -> RetryAfter | Fatal:
        """Outcome for a failed per-PR sub-fetch (reviews, comments).

        Throttling repeats the same PR after the wait; anything else stops
        the run, naming the repository and PR that failed.
        """
        now = self._clock() if self._clock else None
        match outcome_from_error(error, now):
            case RetryAfter() as retry:
                return retry
            case _:
                return Fatal(
                    ReportError(str(error), repository=f"{self._config.owner}/{repo}", item=number)
                )

    def fetch_repository(self, repo: str) -> FetchResult[list[R]]:
        """Run the handler over every listed PR of one repository."""
        owner = self._config.owner
        fetcher: PaginatedFetcher[GitHubPullRequest, list[R]] = PaginatedFetcher(
            lambda page: self._client.list_pull_requests_page(
                owner,
                repo,
                state=self._config.state,
                page=page,
                per_page=self._config.pull_per_page,
            ),
            self.make_handler(repo),
            label=f"{owner}/{repo}",
            sleep=self._sleep,
            clock=self._clock,
        )
        return fetcher.run()

    def run(self, repositories: list[str]) -> ReportRun:
        """Process repositories in order, stopping at the first fatal error."""
        run = ReportRun()
        for repo in repositories:
            log = bind_repo(self._config.owner, repo, report=self.report_name)
            log.info("Processing pull requests")

            fetch = self.fetch_repository(repo)
            if fetch.error is not None:
                run.error = as_report_error(
                    fetch.error, f"{self._config.owner}/{repo}", fetch.failed_page
                )
                log.error("Stopping run: {}", run.error)
                run.repo_reports.append(self.partial_repository(repo, fetch))
                return run

            report = self.finish_repository(repo, fetch)
            log.info(
                "Done: {} lines from {} pull requests ({} skipped)",
                len(report.lines),
                report.pulls_seen,
                report.skipped,
            )
            run.repo_reports.append(report)
        return run


def flatten(results: list[list[Any]]) -> list[Any]:
    """Concatenate per-item result lists, keeping order."""
    return [value for values in results for value in values]
