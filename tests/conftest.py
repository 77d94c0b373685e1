"""Pytest configuration and shared fixtures.

Usage Guide:
- For GitHub API payloads: import dict factories from tests.factories
- For pages handed to the fetch loop: use tests.factories.make_page
- For the fetch loop's sleep/clock: use the fake_sleep / fixed_clock fixtures
"""

from datetime import UTC, datetime

import pytest

from github_review_report.config import get_settings

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# Define a consistent "test epoch" for deterministic date matching across tests.
# All hardcoded dates should reference these constants for consistency.
# -----------------------------------------------------------------------------

# Base dates (datetime objects for Pydantic)
JAN_10 = datetime(2024, 1, 10, 9, 0, 0, tzinfo=UTC)   # PR opened
JAN_12 = datetime(2024, 1, 12, 16, 0, 0, tzinfo=UTC)  # Early merge
JAN_15 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)  # Floor date used by --since tests
JAN_20 = datetime(2024, 1, 20, 16, 0, 0, tzinfo=UTC)  # Default merge date

# ISO 8601 strings (for GitHub API mocks)
JAN_10_ISO = "2024-01-10T09:00:00Z"
JAN_12_ISO = "2024-01-12T16:00:00Z"
JAN_15_ISO = "2024-01-15T10:00:00Z"
JAN_16_ISO = "2024-01-16T14:00:00Z"
JAN_20_ISO = "2024-01-20T16:00:00Z"

# "Now" for fetch loop tests
NOW = datetime(2024, 2, 1, 12, 0, 0, tzinfo=UTC)


# -----------------------------------------------------------------------------
# Fetch Loop Fixtures
# -----------------------------------------------------------------------------
class FakeSleep:
    """Records requested sleeps instead of blocking."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    """Sleep replacement that records durations."""
    return FakeSleep()


@pytest.fixture
def fixed_clock():
    """Clock that always returns NOW."""
    return lambda: NOW


# -----------------------------------------------------------------------------
# Settings Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Drop the cached Settings so env changes in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
