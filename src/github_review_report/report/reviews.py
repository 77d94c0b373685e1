"""Review listing report: one line per review record on closed PRs."""

from __future__ import annotations

from collections.abc import Callable

from github_review_report.github import (
    FetchResult,
    GitHubClientError,
    Outcome,
    Skip,
    Success,
    collect_pages,
)
from github_review_report.schemas import GitHubPullRequest, GitHubReview

from .formatting import rfc3339
from .results import RepoReport
from .runner import PullReportService


def format_review_line(
    remaining: int | None,
    repo: str,
    pr: GitHubPullRequest,
    review: GitHubReview,
) -> str:
    """Quota left, repository, PR number, author, reviewer and submission time."""
    quota = str(remaining) if remaining is not None else "-"
    return (
        f"{quota} {repo} {pr.number} {pr.author} {review.reviewer} "
        f"{rfc3339(review.submitted_at)}"
    )


class ReviewListingService(PullReportService[str]):
    """List every review record of every listed pull request.

    Lines are kept in memory; the caller prints them.
    """

    report_name = "reviews"

    def make_handler(self, repo: str) -> Callable[[GitHubPullRequest], Outcome[list[str]]]:
        owner = self._config.owner
        pr_number = self._config.pr_number

        def handle(pr: GitHubPullRequest) -> Outcome[list[str]]:
            if pr_number is not None and pr.number != pr_number:
                return Skip(f"not PR #{pr_number}")
            try:
                reviews = collect_pages(
                    lambda page: self._client.list_reviews_page(
                        owner,
                        repo,
                        pr.number,
                        page=page,
                        per_page=self._config.review_per_page,
                    )
                )
            except GitHubClientError as e:
                return self.sub_fetch_failed(e, repo, pr.number)

            remaining = self._client.last_rate.remaining if self._client.last_rate else None
            return Success([format_review_line(remaining, repo, pr, r) for r in reviews])

        return handle

    def finish_repository(self, repo: str, fetch: FetchResult[list[str]]) -> RepoReport:
        return RepoReport.from_fetch(repo, fetch, self.lines_for(fetch))
