"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication fails (401) or no token is configured."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for errors that the fetch loop absorbs by waiting.

    Anything else reaching the loop is fatal.
    """

    pass


class GitHubRateLimitError(GitHubRetryableError):
    """Raised when the call quota is exhausted (403/429 with rate limit headers)."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass
