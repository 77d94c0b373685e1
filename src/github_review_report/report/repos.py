"""Resolve which repositories a report covers."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

from github_review_report.config import ReportConfig
from github_review_report.github import GitHubClient, PaginatedFetcher, Success
from github_review_report.logging import get_logger

from .cache import RepoNameCache
from .exceptions import ReportError

logger = get_logger(__name__)

REPO_PAGE_SIZE = 100


def resolve_repositories(
    client: GitHubClient,
    config: ReportConfig,
    cache: RepoNameCache,
    *,
    refresh: bool = False,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], datetime] | None = None,
) -> list[str]:
    """Return the repository names to process.

    A ``--repo`` flag wins. Otherwise the cached list is used, and only
    when there is none (or ``refresh`` is set) the account is listed and
    the cache rewritten.

    Raises:
        ReportError: If listing the account's repositories fails
    """
    if config.repo:
        return [config.repo]

    if not refresh:
        cached = cache.load()
        if cached:
            logger.info("Using {} cached repositories for {}", len(cached), config.owner)
            return cached

    logger.info("Listing repositories for {}", config.owner)
    fetcher: PaginatedFetcher = PaginatedFetcher(
        lambda page: client.list_account_repos_page(
            config.owner, page=page, per_page=REPO_PAGE_SIZE
        ),
        lambda repo: Success(repo.name),
        label=f"{config.owner} repositories",
        sleep=sleep,
        clock=clock,
    )
    result = fetcher.run()
    if not result.success:
        raise ReportError(
            f"Failed to list repositories: {result.error}",
            repository=config.owner,
        ) from result.error

    names: list[str] = result.results
    cache.store(names)
    return names
