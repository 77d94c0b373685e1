"""Tests for the paginated fetch loop.

Tests cover:
- Every page visited exactly once, items in order
- Rate limit errors and exhausted quota: sleep, then repeat the same page
- Fatal errors: stop with partial results
- Per-item outcomes (Skip, RetryAfter, Fatal)
- collect_pages for sub-resources
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from github_review_report.github import (
    DEFAULT_RETRY_SECONDS,
    Fatal,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    PaginatedFetcher,
    RetryAfter,
    Skip,
    Success,
    collect_pages,
    outcome_from_error,
)
from tests.conftest import NOW
from tests.factories import make_page, make_rate


def paged(sizes: list[int]):
    """fetch_page over consecutive integers split into pages of the given sizes."""
    pages = {}
    start = 0
    for i, size in enumerate(sizes, start=1):
        next_page = i + 1 if i < len(sizes) else 0
        pages[i] = make_page(
            list(range(start, start + size)), number=i, next_page=next_page, rate=make_rate()
        )
        start += size
    return MagicMock(side_effect=lambda page: pages[page])


def keep(item):
    return Success(item)


# -----------------------------------------------------------------------------
# Test: Outcomes
# -----------------------------------------------------------------------------
class TestOutcomes:
    """Tests for outcome helpers."""

    def test_retry_after_until_reset(self) -> None:
        assert RetryAfter.until(NOW + timedelta(seconds=5), NOW) == RetryAfter(5.0)

    def test_retry_after_past_reset_clamps_to_zero(self) -> None:
        assert RetryAfter.until(NOW - timedelta(seconds=30), NOW) == RetryAfter(0.0)

    def test_retry_after_without_reset_uses_default(self) -> None:
        assert RetryAfter.until(None, NOW) == RetryAfter(DEFAULT_RETRY_SECONDS)

    def test_rate_limit_error_is_retry(self) -> None:
        error = GitHubRateLimitError("limited", reset_at=NOW + timedelta(seconds=12))
        assert outcome_from_error(error, NOW) == RetryAfter(12.0)

    def test_other_error_is_fatal(self) -> None:
        error = GitHubNotFoundError("gone")
        assert outcome_from_error(error, NOW) == Fatal(error)


# -----------------------------------------------------------------------------
# Test: Page Loop
# -----------------------------------------------------------------------------
class TestPaginatedFetcher:
    """Tests for PaginatedFetcher.run."""

    def test_visits_every_page_once(self, fake_sleep, fixed_clock) -> None:
        """50/50/7 items take exactly three requests and keep server order."""
        fetch = paged([50, 50, 7])
        result = PaginatedFetcher(fetch, keep, sleep=fake_sleep, clock=fixed_clock).run()

        assert result.success
        assert result.page_requests == 3
        assert result.items_seen == 107
        assert result.results == list(range(107))
        assert [c.args[0] for c in fetch.call_args_list] == [1, 2, 3]
        assert fake_sleep.calls == []

    def test_single_page(self, fake_sleep, fixed_clock) -> None:
        fetch = paged([3])
        result = PaginatedFetcher(fetch, keep, sleep=fake_sleep, clock=fixed_clock).run()
        assert result.page_requests == 1
        assert result.results == [0, 1, 2]

    def test_empty_listing(self, fake_sleep, fixed_clock) -> None:
        fetch = MagicMock(return_value=make_page([]))
        result = PaginatedFetcher(fetch, keep, sleep=fake_sleep, clock=fixed_clock).run()
        assert result.success
        assert result.results == []
        assert result.page_requests == 1

    def test_starts_at_given_page(self, fake_sleep, fixed_clock) -> None:
        fetch = paged([2, 2, 2])
        result = PaginatedFetcher(
            fetch, keep, start_page=2, sleep=fake_sleep, clock=fixed_clock
        ).run()
        assert result.results == [2, 3, 4, 5]
        assert [c.args[0] for c in fetch.call_args_list] == [2, 3]

    def test_rate_limit_error_repeats_same_page(self, fake_sleep, fixed_clock) -> None:
        """A throttled page 2 sleeps until reset and is requested again."""
        pages = paged([2, 2, 2])
        failures = [GitHubRateLimitError("limited", reset_at=NOW + timedelta(seconds=5))]

        def fetch(page):
            if page == 2 and failures:
                raise failures.pop()
            return pages(page)

        spy = MagicMock(side_effect=fetch)
        result = PaginatedFetcher(spy, keep, sleep=fake_sleep, clock=fixed_clock).run()

        assert result.success
        assert fake_sleep.calls == [5.0]
        assert [c.args[0] for c in spy.call_args_list] == [1, 2, 2, 3]
        assert result.page_requests == 4
        assert result.rate_limit_waits == 1
        assert result.results == [0, 1, 2, 3, 4, 5]

    def test_reset_in_past_sleeps_zero(self, fake_sleep, fixed_clock) -> None:
        failures = [GitHubRateLimitError("limited", reset_at=NOW - timedelta(seconds=5))]
        pages = paged([1])

        def fetch(page):
            if failures:
                raise failures.pop()
            return pages(page)

        result = PaginatedFetcher(fetch, keep, sleep=fake_sleep, clock=fixed_clock).run()
        assert fake_sleep.calls == [0.0]
        assert result.results == [0]

    def test_exhausted_quota_discards_and_repeats_page(self, fake_sleep, fixed_clock) -> None:
        """remaining == 0 waits for the reset and requests the page again."""
        throttled = make_page([0, 1], next_page=2, rate=make_rate(remaining=0, reset_in=30))
        fresh = make_page([0, 1], next_page=0, rate=make_rate(remaining=4999))
        fetch = MagicMock(side_effect=[throttled, fresh])

        result = PaginatedFetcher(fetch, keep, sleep=fake_sleep, clock=fixed_clock).run()

        assert fake_sleep.calls == [30.0]
        assert [c.args[0] for c in fetch.call_args_list] == [1, 1]
        assert result.results == [0, 1]
        assert result.items_seen == 2

    def test_fatal_error_keeps_partial_results(self, fake_sleep, fixed_clock) -> None:
        pages = paged([2, 2, 2])
        error = GitHubClientError("GitHub API error (500)")

        def fetch(page):
            if page == 3:
                raise error
            return pages(page)

        result = PaginatedFetcher(fetch, keep, sleep=fake_sleep, clock=fixed_clock).run()

        assert not result.success
        assert result.error is error
        assert result.failed_page == 3
        assert result.results == [0, 1, 2, 3]
        assert fake_sleep.calls == []


# -----------------------------------------------------------------------------
# Test: Item Outcomes
# -----------------------------------------------------------------------------
class TestItemOutcomes:
    """Tests for per-item handler outcomes."""

    def test_skip_is_counted_not_collected(self, fake_sleep, fixed_clock) -> None:
        fetch = paged([4])
        result = PaginatedFetcher(
            fetch,
            lambda n: Success(n) if n % 2 == 0 else Skip("odd"),
            sleep=fake_sleep,
            clock=fixed_clock,
        ).run()
        assert result.results == [0, 2]
        assert result.skipped == 2
        assert result.items_seen == 4

    def test_retry_after_reprocesses_same_item(self, fake_sleep, fixed_clock) -> None:
        """The handler is called again for the same item after the wait."""
        seen: list[int] = []
        retries = {1: 1}

        def handle(n):
            seen.append(n)
            if retries.get(n):
                retries[n] -= 1
                return RetryAfter(7.0)
            return Success(n)

        result = PaginatedFetcher(
            paged([3]), handle, sleep=fake_sleep, clock=fixed_clock
        ).run()

        assert seen == [0, 1, 1, 2]
        assert result.results == [0, 1, 2]
        assert result.items_seen == 3
        assert fake_sleep.calls == [7.0]
        assert result.page_requests == 1

    def test_fatal_item_stops_loop(self, fake_sleep, fixed_clock) -> None:
        error = ValueError("bad item")
        fetch = paged([3, 3])

        def handle(n):
            return Fatal(error) if n == 1 else Success(n)

        result = PaginatedFetcher(fetch, handle, sleep=fake_sleep, clock=fixed_clock).run()

        assert result.error is error
        assert result.failed_page == 1
        assert result.results == [0]
        assert fetch.call_count == 1


# -----------------------------------------------------------------------------
# Test: collect_pages
# -----------------------------------------------------------------------------
class TestCollectPages:
    """Tests for draining sub-resources."""

    def test_collects_all_pages(self) -> None:
        assert collect_pages(paged([2, 1])) == [0, 1, 2]

    def test_throttled_page_raises(self) -> None:
        fetch = MagicMock(return_value=make_page([1], rate=make_rate(remaining=0, reset_in=40)))
        with pytest.raises(GitHubRateLimitError) as exc_info:
            collect_pages(fetch)
        assert exc_info.value.reset_at == NOW + timedelta(seconds=40)

    def test_errors_propagate(self) -> None:
        fetch = MagicMock(side_effect=GitHubNotFoundError("missing"))
        with pytest.raises(GitHubNotFoundError):
            collect_pages(fetch)
