"""Result objects for report runs.

Structured results give the CLI one shape to print (text or JSON)
and to decide the exit status from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from github_review_report.github.pagination import FetchResult

from .exceptions import ReportError


@dataclass
class RepoReport:
    """Lines produced for one repository."""

    repository: str
    """Repository name (without owner)."""

    lines: list[str] = field(default_factory=list)
    """Derived output lines, in processing order."""

    path: Path | None = None
    """File the lines were flushed to, if any."""

    pulls_seen: int = 0
    """Pull requests handed to the handler."""

    skipped: int = 0
    """Pull requests filtered out."""

    rate_limit_waits: int = 0
    """Times the run slept for a rate limit reset."""

    @classmethod
    def from_fetch(
        cls,
        repository: str,
        fetch: FetchResult[Any],
        lines: list[str],
        path: Path | None = None,
    ) -> RepoReport:
        return cls(
            repository=repository,
            lines=lines,
            path=path,
            pulls_seen=fetch.items_seen,
            skipped=fetch.skipped,
            rate_limit_waits=fetch.rate_limit_waits,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "repository": self.repository,
            "lines": len(self.lines),
            "path": str(self.path) if self.path else None,
            "pulls_seen": self.pulls_seen,
            "skipped": self.skipped,
            "rate_limit_waits": self.rate_limit_waits,
        }


@dataclass
class ReportRun:
    """Outcome of a report over one or more repositories.

    Repositories are processed in order; a fatal error stops the run, so
    ``repo_reports`` holds every repository finished before it, followed
    by the partial report of the repository that failed.
    """

    repo_reports: list[RepoReport] = field(default_factory=list)
    error: ReportError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def total_lines(self) -> int:
        return sum(len(r.lines) for r in self.repo_reports)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "repositories": [r.to_dict() for r in self.repo_reports],
            "total_lines": self.total_lines,
            "error": str(self.error) if self.error else None,
        }
