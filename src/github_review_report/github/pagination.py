"""Paginated fetch loop with rate limit backoff.

Drives a paged GitHub endpoint page by page, handing every item to a
per-item handler. Page fetches and handlers report what happened through
an explicit outcome instead of raising:

    Success(value)      item/page produced a value
    Skip(reason)        benign, nothing to collect
    RetryAfter(seconds) throttled; sleep, then repeat the same unit of work
    Fatal(error)        stop the loop and hand the error to the caller

Rate limit waits repeat indefinitely. Any other error ends the loop; the
results gathered so far are returned alongside it.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar

from github_review_report.logging import get_logger

from .exceptions import GitHubClientError, GitHubRateLimitError
from .rate_limit import PoolRateLimit

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_RETRY_SECONDS = 60.0
"""Wait used when a rate limit error carries no reset time."""


# -----------------------------------------------------------------------------
# Outcomes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Success(Generic[T]):
    """The unit of work produced a value."""

    value: T


@dataclass(frozen=True)
class Skip:
    """The item was filtered out; not an error."""

    reason: str = ""


@dataclass(frozen=True)
class RetryAfter:
    """Throttled: wait ``seconds`` and repeat the same unit of work."""

    seconds: float

    @classmethod
    def until(cls, reset_at: datetime | None, now: datetime) -> RetryAfter:
        """Wait for ``reset_at - now``, clamped to zero."""
        if reset_at is None:
            return cls(DEFAULT_RETRY_SECONDS)
        return cls(max(0.0, (reset_at - now).total_seconds()))


@dataclass(frozen=True)
class Fatal:
    """Unrecoverable error; the loop stops."""

    error: Exception


Outcome = Success[T] | Skip | RetryAfter | Fatal


def outcome_from_error(error: Exception, now: datetime | None = None) -> RetryAfter | Fatal:
    """Classify an exception: rate limiting is retried, everything else is fatal."""
    if isinstance(error, GitHubRateLimitError):
        return RetryAfter.until(error.reset_at, now or datetime.now(UTC))
    return Fatal(error)


# -----------------------------------------------------------------------------
# Pages and results
# -----------------------------------------------------------------------------
@dataclass
class Page(Generic[T]):
    """One response of a paged endpoint."""

    items: list[T]
    """Decoded items in server order."""

    number: int = 1
    """Page number that was requested."""

    next_page: int = 0
    """Page number of the following page; 0 when this is the last one."""

    rate: PoolRateLimit | None = None
    """Rate limit state from the response headers."""

    @property
    def is_last(self) -> bool:
        return self.next_page == 0

    @property
    def is_throttled(self) -> bool:
        """True when the response left no quota for further calls."""
        return self.rate is not None and self.rate.is_exhausted


@dataclass
class FetchResult(Generic[R]):
    """Accumulated outcome of one loop run."""

    results: list[R] = field(default_factory=list)
    """Values of every Success, in processing order."""

    page_requests: int = 0
    """Page requests issued, including repeats after a rate limit wait."""

    items_seen: int = 0
    """Items handed to the handler (repeats of the same item count once)."""

    skipped: int = 0
    """Items the handler skipped."""

    rate_limit_waits: int = 0
    """Times the loop slept for a rate limit reset."""

    error: Exception | None = None
    """Fatal error that ended the loop early."""

    failed_page: int | None = None
    """Page being processed when the fatal error happened."""

    @property
    def success(self) -> bool:
        return self.error is None


# -----------------------------------------------------------------------------
# Loop
# -----------------------------------------------------------------------------
class PaginatedFetcher(Generic[T, R]):
    """Fetch every page of a query and process each item.

    Usage:
        fetcher = PaginatedFetcher(
            lambda page: client.list_pull_requests_page("m-lab", "ndt", page=page),
            handle_pull,
            label="m-lab/ndt pulls",
        )
        result = fetcher.run()
        if not result.success:
            raise result.error
    """

    def __init__(
        self,
        fetch_page: Callable[[int], Page[T]],
        handle_item: Callable[[T], Outcome[R]],
        *,
        start_page: int = 1,
        label: str = "",
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            fetch_page: Returns the page with the given number. May raise
                GitHubClientError subclasses.
            handle_item: Turns one item into an Outcome. Must not raise for
                API errors; nested fetches convert them with outcome_from_error().
            start_page: First page number to request
            label: Name used in progress logs
            sleep: Blocking sleep, injectable for tests
            clock: Returns the current UTC time, injectable for tests
        """
        self._fetch_page = fetch_page
        self._handle_item = handle_item
        self._start_page = start_page
        self._label = label
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(UTC))

    def run(self) -> FetchResult[R]:
        """Visit every page once and process every item in server order."""
        result: FetchResult[R] = FetchResult()
        page_number = self._start_page

        while True:
            result.page_requests += 1
            match self._fetch(page_number):
                case RetryAfter(seconds=seconds):
                    self._wait(seconds, f"page {page_number}", result)
                    continue
                case Fatal(error=error):
                    result.error = error
                    result.failed_page = page_number
                    return result
                case Success(value=page):
                    pass
                case Skip():
                    return result

            if page.rate is not None:
                logger.info(
                    "{} page {}: {} items ({} calls remaining)",
                    self._label,
                    page_number,
                    len(page.items),
                    page.rate.remaining,
                )

            for item in page.items:
                result.items_seen += 1
                error = self._process(item, result)
                if error is not None:
                    result.error = error
                    result.failed_page = page_number
                    return result

            if page.is_last:
                return result
            page_number = page.next_page

    def _fetch(self, page_number: int) -> Outcome[Page[T]]:
        try:
            page = self._fetch_page(page_number)
        except GitHubClientError as e:
            return outcome_from_error(e, self._clock())

        if page.is_throttled:
            assert page.rate is not None
            return RetryAfter.until(page.rate.reset_at, self._clock())
        return Success(page)

    def _process(self, item: T, result: FetchResult[R]) -> Exception | None:
        """Run the handler until it stops asking for a retry."""
        while True:
            match self._handle_item(item):
                case Success(value=value):
                    result.results.append(value)
                    return None
                case Skip():
                    result.skipped += 1
                    return None
                case RetryAfter(seconds=seconds):
                    self._wait(seconds, "item", result)
                case Fatal(error=error):
                    return error

    def _wait(self, seconds: float, what: str, result: FetchResult[R]) -> None:
        result.rate_limit_waits += 1
        logger.warning(
            "{}: rate limited, sleeping {:.0f}s before repeating {}",
            self._label or "fetch",
            seconds,
            what,
        )
        self._sleep(seconds)


def collect_pages(fetch_page: Callable[[int], Page[T]], start_page: int = 1) -> list[T]:
    """Drain every page of a small sub-resource (reviews, comments).

    Unlike PaginatedFetcher this does not wait: a throttled response raises
    GitHubRateLimitError so the caller can retry its whole unit of work.

    Raises:
        GitHubRateLimitError: If any response is throttled
        GitHubClientError: On any other API failure
    """
    items: list[T] = []
    page_number = start_page
    while True:
        page = fetch_page(page_number)
        if page.is_throttled:
            assert page.rate is not None
            raise GitHubRateLimitError(
                f"Rate limit exhausted while fetching page {page_number}",
                reset_at=page.rate.reset_at,
            )
        items.extend(page.items)
        if page.is_last:
            return items
        page_number = page.next_page
