"""Tests for the issue search report."""

from datetime import timedelta
from unittest.mock import MagicMock

from github_review_report.github import GitHubRateLimitError
from github_review_report.report import format_issue_line, run_search, scoped_query
from github_review_report.schemas import GitHubIssue
from tests.conftest import NOW
from tests.factories import make_github_issue, make_page, make_rate


def issue(**overrides) -> GitHubIssue:
    return GitHubIssue.model_validate(make_github_issue(**overrides))


class TestFormatIssueLine:
    """Tests for the search result line."""

    def test_fixed_width_columns(self):
        line = format_issue_line(issue(number=7, login="octocat", title="Fix the flake"))
        url = "https://github.com/m-lab/ndt-server/issues/7"
        assert line == f"{url:<55} 2024-01-15T10:00:00Z   7 octocat         Fix the flake"

    def test_long_values_not_truncated(self):
        line = format_issue_line(issue(number=12345, login="a-very-long-login-name"))
        assert " 12345 a-very-long-login-name " in line


class TestScopedQuery:
    """Tests for restricting a query to one account."""

    def test_adds_user_qualifier(self):
        assert scoped_query("is:pr is:open", "m-lab") == "is:pr is:open user:m-lab"

    def test_keeps_existing_qualifier(self):
        assert scoped_query("is:pr repo:m-lab/etl", "m-lab") == "is:pr repo:m-lab/etl"

    def test_no_owner(self):
        assert scoped_query("is:pr", None) == "is:pr"


class TestRunSearch:
    """Tests for the search loop."""

    def test_all_pages_oldest_first(self, fake_sleep, fixed_clock):
        client = MagicMock()
        client.search_issues_page.side_effect = [
            make_page([issue(number=1), issue(number=2)], next_page=2, rate=make_rate()),
            make_page([issue(number=3)], number=2, rate=make_rate()),
        ]

        result = run_search(client, "is:pr", sleep=fake_sleep, clock=fixed_clock)

        assert result.success
        assert len(result.results) == 3
        assert [c.kwargs["page"] for c in client.search_issues_page.call_args_list] == [1, 2]
        kwargs = client.search_issues_page.call_args.kwargs
        assert kwargs["sort"] == "created"
        assert kwargs["order"] == "asc"
        assert kwargs["per_page"] == 100

    def test_rate_limit_waits_and_resumes(self, fake_sleep, fixed_clock):
        client = MagicMock()
        client.search_issues_page.side_effect = [
            make_page([issue(number=1)], next_page=2),
            GitHubRateLimitError("limited", reset_at=NOW + timedelta(seconds=45)),
            make_page([issue(number=2)], number=2),
        ]

        result = run_search(client, "is:issue", sleep=fake_sleep, clock=fixed_clock)

        assert len(result.results) == 2
        assert fake_sleep.calls == [45.0]
        assert [c.kwargs["page"] for c in client.search_issues_page.call_args_list] == [1, 2, 2]
