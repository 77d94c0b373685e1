"""Pydantic schemas for GitHub API responses."""

from .enums import CreditKind, ReviewState
from .github_api import (
    GitHubIssue,
    GitHubIssueComment,
    GitHubPullRequest,
    GitHubRepository,
    GitHubReview,
    GitHubUser,
)

__all__ = [
    # Enums
    "CreditKind",
    "ReviewState",
    # GitHub API
    "GitHubIssue",
    "GitHubIssueComment",
    "GitHubPullRequest",
    "GitHubRepository",
    "GitHubReview",
    "GitHubUser",
]
