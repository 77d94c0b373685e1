"""GitHub API client module.

This module provides:
- GitHubClient: githubkit wrapper returning one Page per call
- PaginatedFetcher: page loop with rate limit backoff and per-item outcomes
- Rate limit state: PoolRateLimit, RateLimitSnapshot, etc.
"""

from .client import GitHubClient, next_page_from_link
from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
)
from .pagination import (
    DEFAULT_RETRY_SECONDS,
    FetchResult,
    Fatal,
    Outcome,
    Page,
    PaginatedFetcher,
    RetryAfter,
    Skip,
    Success,
    collect_pages,
    outcome_from_error,
)
from .rate_limit import (
    PoolRateLimit,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
    TokenInfo,
)

__all__ = [
    # Client
    "GitHubClient",
    "next_page_from_link",
    # Exceptions
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    # Pagination
    "DEFAULT_RETRY_SECONDS",
    "FetchResult",
    "Fatal",
    "Outcome",
    "Page",
    "PaginatedFetcher",
    "RetryAfter",
    "Skip",
    "Success",
    "collect_pages",
    "outcome_from_error",
    # Rate limit state
    "PoolRateLimit",
    "RateLimitPool",
    "RateLimitSnapshot",
    "RateLimitStatus",
    "TokenInfo",
]
