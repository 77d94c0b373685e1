"""Flat-file output for per-repository results."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from github_review_report.logging import get_logger

logger = get_logger(__name__)


class ResultWriter:
    """Write one results file per repository under a results directory.

    Files are overwritten on every run; each line ends with a newline.
    """

    def __init__(self, results_dir: Path) -> None:
        self._results_dir = results_dir

    def path_for(self, repository: str) -> Path:
        return self._results_dir / f"{repository}.txt"

    def write(self, repository: str, lines: Iterable[str]) -> Path:
        path = self.path_for(repository)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = "".join(f"{line}\n" for line in lines)
        path.write_text(content, encoding="utf-8")
        logger.info("Wrote {} lines to {}", content.count("\n"), path)
        return path
