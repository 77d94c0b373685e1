"""Cache of an account's repository names.

Listing every repository of an organization costs a page of API calls
per hundred repositories, so the names are kept in a plain text file,
one per line, and reused by later runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from github_review_report.logging import get_logger

logger = get_logger(__name__)


class RepoNameCache(Protocol):
    """Storage for a list of repository names."""

    def load(self) -> list[str] | None:
        """Return the cached names, or None when nothing is cached."""
        ...

    def store(self, names: list[str]) -> None:
        """Replace the cached names."""
        ...


class FileRepoNameCache:
    """Newline-delimited repository name file.

    Not safe against concurrent runs writing the same file.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[str] | None:
        if not self._path.exists():
            return None
        names = [line.strip() for line in self._path.read_text(encoding="utf-8").splitlines()]
        names = [name for name in names if name]
        logger.debug("Loaded {} repository names from {}", len(names), self._path)
        return names

    def store(self, names: list[str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text("".join(f"{name}\n" for name in names), encoding="utf-8")
        logger.info("Cached {} repository names in {}", len(names), self._path)
