"""Synchronous GitHub API client wrapper using githubkit.

Every listing method fetches exactly one page and returns it as a
:class:`Page` carrying the next-page cursor and the response's rate
limit state, so the fetch loop decides when to advance, wait or stop.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime
from typing import Any, Literal, TypeVar

from githubkit import GitHub
from githubkit.exception import GitHubException, RequestFailed
from pydantic import BaseModel, ValidationError

from github_review_report.config import get_settings
from github_review_report.logging import get_logger
from github_review_report.schemas import (
    GitHubIssue,
    GitHubIssueComment,
    GitHubPullRequest,
    GitHubRepository,
    GitHubReview,
)

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from .pagination import Page
from .rate_limit import PoolRateLimit, RateLimitPool, RateLimitSnapshot

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

PRState = Literal["open", "closed", "all"]

_NEXT_LINK = re.compile(r'<([^>]+)>;\s*rel="next"')
_PAGE_PARAM = re.compile(r"[?&]page=(\d+)")


def next_page_from_link(link_header: str | None) -> int:
    """Extract the next page number from a GitHub Link header.

    Format: <https://api.github.com/...?page=2>; rel="next", <...>; rel="last"

    Returns:
        The next page number, or 0 if there is no next page
    """
    if not link_header:
        return 0
    for part in link_header.split(","):
        match = _NEXT_LINK.search(part)
        if match:
            page = _PAGE_PARAM.search(match.group(1))
            return int(page.group(1)) if page else 0
    return 0


def _header_dict(response: Any) -> dict[str, str]:
    """Lower-cased header dict from a githubkit/httpx response."""
    headers = getattr(response, "headers", None)
    if headers is None:
        return {}
    items: Iterable[tuple[str, str]] = headers.items() if hasattr(headers, "items") else headers
    return {str(k).lower(): str(v) for k, v in items}


class GitHubClient:
    """GitHub API client for paged issue, PR and review retrieval.

    Usage:
        with GitHubClient(token) as client:
            page = client.list_pull_requests_page("m-lab", "ndt", state="closed")
            for pr in page.items:
                print(pr.number, pr.title)
            if not page.is_last:
                page = client.list_pull_requests_page(
                    "m-lab", "ndt", state="closed", page=page.next_page
                )
    """

    def __init__(self, token: str | None = None) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        self._token = token or get_settings().github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Pass --authtoken or set GITHUB_TOKEN."
            )
        self._client: GitHub[Any] | None = None
        self._last_rate: PoolRateLimit | None = None

    @property
    def last_rate(self) -> PoolRateLimit | None:
        """Rate limit state from the most recent response that carried one."""
        return self._last_rate

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance.

        githubkit's own retry is disabled: throttling must surface so the
        fetch loop can sleep and repeat the right unit of work.
        """
        if self._client is None:
            self._client = GitHub(self._token, auto_retry=False)
        return self._client

    def close(self) -> None:
        """Drop the underlying HTTP client."""
        if self._client is not None:
            self._client = None

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Rate Limit Info
    # -------------------------------------------------------------------------
    def get_rate_limit(self) -> RateLimitSnapshot:
        """Get current rate limit status for all pools.

        This call does not count against the core quota.
        """
        try:
            resp = self._github.rest.rate_limit.get()
        except RequestFailed as e:
            raise self._handle_error(e) from e
        except GitHubException as e:
            raise GitHubClientError(f"GitHub request failed: {e}") from e
        return RateLimitSnapshot.from_api_response(resp.parsed_data.model_dump())

    # -------------------------------------------------------------------------
    # Paged Listings
    # -------------------------------------------------------------------------
    def search_issues_page(
        self,
        query: str,
        *,
        page: int = 1,
        per_page: int = 100,
        sort: Literal["created", "updated", "comments"] = "created",
        order: Literal["asc", "desc"] = "asc",
    ) -> Page[GitHubIssue]:
        """Search issues and pull requests.

        Args:
            query: GitHub search query (e.g., "is:pr author:octocat")
            page: Page number to fetch
            per_page: Results per page (max 100)
            sort: Sort field
            order: Sort direction

        Returns:
            One page of GitHubIssue objects
        """
        return self._fetch_page(
            lambda: self._github.rest.search.issues_and_pull_requests(
                q=query, sort=sort, order=order, per_page=per_page, page=page
            ),
            GitHubIssue,
            page,
            pool=RateLimitPool.SEARCH,
            items=lambda data: data.items,
        )

    def list_account_repos_page(
        self,
        account: str,
        *,
        page: int = 1,
        per_page: int = 100,
    ) -> Page[GitHubRepository]:
        """List repositories of an organization, or of a user if no such org exists.

        Args:
            account: Organization or user login
            page: Page number to fetch
            per_page: Results per page (max 100)
        """
        try:
            return self._fetch_page(
                lambda: self._github.rest.repos.list_for_org(
                    org=account, per_page=per_page, page=page
                ),
                GitHubRepository,
                page,
            )
        except GitHubNotFoundError:
            logger.debug("{} is not an organization, listing user repositories", account)
            return self._fetch_page(
                lambda: self._github.rest.repos.list_for_user(
                    username=account, per_page=per_page, page=page
                ),
                GitHubRepository,
                page,
            )

    def list_pull_requests_page(
        self,
        owner: str,
        repo: str,
        *,
        state: PRState = "closed",
        page: int = 1,
        per_page: int = 50,
        sort: Literal["created", "updated", "popularity", "long-running"] = "created",
        direction: Literal["asc", "desc"] = "desc",
    ) -> Page[GitHubPullRequest]:
        """List one page of pull requests for a repository.

        Args:
            owner: Repository owner (org or user)
            repo: Repository name
            state: Filter by state ("open", "closed", "all")
            page: Page number to fetch
            per_page: Results per page (max 100)
            sort: What to sort results by
            direction: Sort direction
        """
        try:
            return self._fetch_page(
                lambda: self._github.rest.pulls.list(
                    owner=owner,
                    repo=repo,
                    state=state,
                    sort=sort,
                    direction=direction,
                    per_page=per_page,
                    page=page,
                ),
                GitHubPullRequest,
                page,
            )
        except GitHubNotFoundError as e:
            raise GitHubNotFoundError(f"Repository {owner}/{repo} not found") from e

    def list_reviews_page(
        self,
        owner: str,
        repo: str,
        number: int,
        *,
        page: int = 1,
        per_page: int = 100,
    ) -> Page[GitHubReview]:
        """List one page of review records for a pull request.

        Unlike ``requested_reviewers`` on the PR, this includes reviewers
        who already approved.
        """
        try:
            return self._fetch_page(
                lambda: self._github.rest.pulls.list_reviews(
                    owner=owner, repo=repo, pull_number=number, per_page=per_page, page=page
                ),
                GitHubReview,
                page,
            )
        except GitHubNotFoundError as e:
            raise GitHubNotFoundError(f"PR #{number} not found in {owner}/{repo}") from e

    def list_issue_comments_page(
        self,
        owner: str,
        repo: str,
        number: int,
        *,
        page: int = 1,
        per_page: int = 100,
    ) -> Page[GitHubIssueComment]:
        """List one page of conversation comments on an issue or pull request."""
        try:
            return self._fetch_page(
                lambda: self._github.rest.issues.list_comments(
                    owner=owner, repo=repo, issue_number=number, per_page=per_page, page=page
                ),
                GitHubIssueComment,
                page,
            )
        except GitHubNotFoundError as e:
            raise GitHubNotFoundError(f"Issue #{number} not found in {owner}/{repo}") from e

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------
    def _fetch_page(
        self,
        call: Callable[[], Any],
        model: type[ModelT],
        page: int,
        *,
        pool: RateLimitPool = RateLimitPool.CORE,
        items: Callable[[Any], Iterable[Any]] | None = None,
    ) -> Page[ModelT]:
        """Issue one request and decode it into a Page."""
        try:
            resp = call()
        except RequestFailed as e:
            raise self._handle_error(e) from e
        except GitHubException as e:
            raise GitHubClientError(f"GitHub request failed: {e}") from e

        headers = _header_dict(resp)
        data = resp.parsed_data
        raw_items = items(data) if items is not None else data

        decoded: list[ModelT] = []
        for item in raw_items:
            try:
                decoded.append(model.model_validate(item.model_dump()))
            except ValidationError as e:
                # Skip records that don't validate (deleted users, partial data)
                logger.debug("Skipping {} record: {}", model.__name__, e)
                continue

        rate = PoolRateLimit.from_headers(headers, default_pool=pool)
        if rate is not None:
            self._last_rate = rate

        return Page(
            items=decoded,
            number=page,
            next_page=next_page_from_link(headers.get("link")),
            rate=rate,
        )

    def _handle_error(self, error: RequestFailed) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        response = error.response
        status = response.status_code
        headers = _header_dict(response)

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        if status in (403, 429):
            reset_at = self._rate_limit_reset(headers)
            if reset_at is not None:
                return GitHubRateLimitError("GitHub rate limit exceeded", reset_at=reset_at)
            return GitHubClientError(f"Access forbidden: {error}")
        if status == 404:
            return GitHubNotFoundError(str(error))
        return GitHubClientError(f"GitHub API error ({status}): {error}")

    @staticmethod
    def _rate_limit_reset(headers: Mapping[str, str]) -> datetime | None:
        """Reset time if the headers describe a throttled response, else None.

        Primary limits report x-ratelimit-remaining: 0 with a reset epoch;
        secondary limits send retry-after, in seconds or as an HTTP date.
        """
        if "retry-after" in headers:
            return _parse_retry_after(headers["retry-after"])
        if headers.get("x-ratelimit-remaining") == "0":
            try:
                reset_ts = int(headers.get("x-ratelimit-reset", "0"))
            except ValueError:
                reset_ts = 0
            return datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else datetime.now(UTC)
        return None


def _parse_retry_after(value: str) -> datetime:
    """Reset time from a retry-after value; unparseable values mean now."""
    now = datetime.now(UTC)
    try:
        return now + timedelta(seconds=max(int(value.strip()), 0))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug("Unparseable retry-after header: {!r}", value)
        return now
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return when
