"""Pydantic schemas for parsing GitHub API responses.

These schemas map the subset of the GitHub REST API response structure
that the reports filter and format on. Unknown fields are ignored.
See: https://docs.github.com/en/rest
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import ReviewState


class GitHubUser(BaseModel):
    """GitHub user object from API responses."""

    login: str = Field(description="GitHub username")
    id: int = Field(description="GitHub user ID")
    type: str = Field(default="User", description="User type")


class GitHubRepository(BaseModel):
    """Repository object from the org/user repository listing."""

    name: str = Field(description="Repository name (e.g., 'prometheus-support')")
    full_name: str = Field(description="Full repository path (e.g., 'm-lab/prometheus-support')")
    archived: bool = Field(default=False, description="Whether the repository is archived")


class GitHubIssue(BaseModel):
    """Issue (or pull request) object from the search endpoint.

    Maps to items of: GET /search/issues
    """

    number: int = Field(description="Issue number")
    html_url: str = Field(description="GitHub issue URL")
    title: str = Field(description="Issue title")
    state: str = Field(default="open", description="Issue state (open, closed)")
    user: GitHubUser | None = Field(default=None, description="Issue author")
    created_at: datetime = Field(description="When the issue was created")
    body: str | None = Field(default=None, description="Issue description")

    @property
    def author(self) -> str:
        return self.user.login if self.user else ""


class GitHubPullRequest(BaseModel):
    """Pull request object from the pulls listing.

    Maps to items of: GET /repos/{owner}/{repo}/pulls
    """

    number: int = Field(description="PR number")
    html_url: str = Field(description="GitHub PR URL")
    state: str = Field(description="PR state (open, closed)")
    title: str = Field(description="PR title")
    body: str | None = Field(default=None, description="PR description")

    user: GitHubUser | None = Field(default=None, description="PR author")

    created_at: datetime = Field(description="When PR was created")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
    closed_at: datetime | None = Field(default=None, description="When PR was closed")
    merged_at: datetime | None = Field(
        default=None, description="When PR was merged (None = not merged)"
    )

    requested_reviewers: list[GitHubUser] = Field(
        default_factory=list,
        description="Reviewers still pending (approvers drop off this list)",
    )

    @property
    def author(self) -> str:
        return self.user.login if self.user else ""


class GitHubReview(BaseModel):
    """GitHub review object from reviews endpoint."""

    id: int = Field(description="Review ID")
    user: GitHubUser | None = Field(default=None, description="Reviewer (None for deleted users)")
    state: str = Field(description="Review state (APPROVED, CHANGES_REQUESTED, COMMENTED, etc.)")
    submitted_at: datetime | None = Field(default=None, description="When review was submitted")

    @property
    def reviewer(self) -> str:
        return self.user.login if self.user else ""

    @property
    def is_approval(self) -> bool:
        return self.state == ReviewState.APPROVED


class GitHubIssueComment(BaseModel):
    """Conversation comment from the issue comments endpoint.

    Maps to items of: GET /repos/{owner}/{repo}/issues/{number}/comments
    """

    id: int = Field(description="Comment ID")
    user: GitHubUser | None = Field(default=None, description="Comment author")
    body: str | None = Field(default=None, description="Comment text")
    created_at: datetime = Field(description="When the comment was posted")

    @property
    def commenter(self) -> str:
        return self.user.login if self.user else ""
