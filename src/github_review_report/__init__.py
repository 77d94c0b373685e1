"""GitHub review report - paginated GitHub queries for issues, PRs and review credits."""

__version__ = "0.1.0"
