"""Report workflows built on the paginated fetch loop.

- search: issue search, one line per result
- reviews: review records of closed PRs, one line per review
- credits: approving reviewers / LGTM commenters of merged PRs, one file per repository
"""

from .cache import FileRepoNameCache, RepoNameCache
from .credits import Credit, CreditReportService
from .exceptions import ReportError
from .formatting import rfc3339
from .repos import resolve_repositories
from .results import RepoReport, ReportRun
from .reviews import ReviewListingService, format_review_line
from .runner import PullReportService
from .search import format_issue_line, run_search, scoped_query
from .writer import ResultWriter

__all__ = [
    "Credit",
    "CreditReportService",
    "FileRepoNameCache",
    "PullReportService",
    "RepoNameCache",
    "RepoReport",
    "ReportError",
    "ReportRun",
    "ResultWriter",
    "ReviewListingService",
    "format_issue_line",
    "format_review_line",
    "resolve_repositories",
    "rfc3339",
    "run_search",
    "scoped_query",
]
