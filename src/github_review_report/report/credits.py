"""Review credit report.

For every merged pull request, credit the people who approved it: each
APPROVED review from someone other than the author earns one credit.
Pull requests merged without an approving review fall back to the
conversation, where a non-author comment containing the LGTM marker
counts instead.

One credit line per actor per PR, tab-separated:

    repo  number  merged_at  author  actor  kind

Lines are flushed to ``<results_dir>/<repo>.txt`` once a repository is
done; the file is overwritten on every run.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from github_review_report.config import ReportConfig
from github_review_report.github import (
    FetchResult,
    GitHubClient,
    GitHubClientError,
    Outcome,
    Skip,
    Success,
    collect_pages,
)
from github_review_report.logging import bind_pr
from github_review_report.schemas import CreditKind, GitHubPullRequest

from .formatting import rfc3339
from .results import RepoReport
from .runner import PullReportService, flatten
from .writer import ResultWriter


@dataclass(frozen=True)
class Credit:
    """One actor credited on one merged pull request."""

    repository: str
    number: int
    merged_at: datetime
    author: str
    actor: str
    kind: CreditKind

    def to_line(self) -> str:
        return "\t".join(
            [
                self.repository,
                str(self.number),
                rfc3339(self.merged_at),
                self.author,
                self.actor,
                self.kind.value,
            ]
        )


class CreditReportService(PullReportService[Credit]):
    """Collect review credits per repository and write them to disk.

    Usage:
        with GitHubClient(token) as client:
            service = CreditReportService(client, config, ResultWriter(config.results_dir))
            run = service.run(["ndt-server", "prometheus-support"])
            if not run.success:
                raise SystemExit(str(run.error))
    """

    report_name = "credits"

    def __init__(
        self,
        client: GitHubClient,
        config: ReportConfig,
        writer: ResultWriter,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(client, config, sleep=sleep, clock=clock)
        self._writer = writer

    def make_handler(self, repo: str) -> Callable[[GitHubPullRequest], Outcome[list[Credit]]]:
        def handle(pr: GitHubPullRequest) -> Outcome[list[Credit]]:
            # Filters run before any API call
            if self._config.pr_number is not None and pr.number != self._config.pr_number:
                return Skip(f"not PR #{self._config.pr_number}")
            if pr.merged_at is None:
                return Skip("not merged")
            if self._config.since is not None and pr.merged_at < self._config.since:
                return Skip("merged before floor date")

            try:
                return Success(self.collect_credits(repo, pr))
            except GitHubClientError as e:
                return self.sub_fetch_failed(e, repo, pr.number)

        return handle

    def collect_credits(self, repo: str, pr: GitHubPullRequest) -> list[Credit]:
        """Credits for one merged PR, one per actor.

        Keyed by actor login: a repeated action by the same actor replaces
        the earlier credit, and actors keep their first-seen order.

        Raises:
            GitHubClientError: If fetching reviews or comments fails
        """
        assert pr.merged_at is not None
        owner = self._config.owner
        log = bind_pr(owner, repo, pr.number, report=self.report_name)
        by_actor: dict[str, Credit] = {}

        def credit(actor: str, kind: CreditKind) -> None:
            if not actor or actor == pr.author:
                return
            by_actor[actor] = Credit(
                repository=repo,
                number=pr.number,
                merged_at=pr.merged_at,
                author=pr.author,
                actor=actor,
                kind=kind,
            )

        reviews = collect_pages(
            lambda page: self._client.list_reviews_page(
                owner, repo, pr.number, page=page, per_page=self._config.review_per_page
            )
        )
        for review in reviews:
            if review.is_approval:
                credit(review.reviewer, CreditKind.APPROVED)

        if not by_actor:
            marker = self._config.lgtm_marker.lower()
            comments = collect_pages(
                lambda page: self._client.list_issue_comments_page(
                    owner, repo, pr.number, page=page, per_page=self._config.review_per_page
                )
            )
            for comment in comments:
                if marker in (comment.body or "").lower():
                    credit(comment.commenter, CreditKind.LGTM)

        log.debug("{} reviews, {} credits", len(reviews), len(by_actor))
        return list(by_actor.values())

    def lines_for(self, fetch: FetchResult[list[Credit]]) -> list[str]:
        return [c.to_line() for c in flatten(fetch.results)]

    def finish_repository(self, repo: str, fetch: FetchResult[list[Credit]]) -> RepoReport:
        lines = self.lines_for(fetch)
        path = self._writer.write(repo, lines)
        return RepoReport.from_fetch(repo, fetch, lines, path)
