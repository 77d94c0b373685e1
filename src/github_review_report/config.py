"""Configuration settings for GitHub review report."""

from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class ReportSettings(BaseModel):
    """Defaults for the report commands.

    Page sizes follow what each listing was tuned for: search returns
    the maximum page, pull listings stay small so a throttled page is
    cheap to repeat.
    """

    results_dir: str = Field(
        default="results",
        description="Directory receiving one credit file per repository",
    )
    repo_cache_file: str = Field(
        default="repos-{owner}.txt",
        description="Newline-delimited repository name cache; {owner} is substituted",
    )
    search_per_page: int = Field(default=100, ge=1, le=100, description="Search page size")
    pull_per_page: int = Field(default=50, ge=1, le=100, description="Pull listing page size")
    review_per_page: int = Field(
        default=100, ge=1, le=100, description="Review/comment page size"
    )
    lgtm_marker: str = Field(
        default="LGTM",
        min_length=1,
        description="Comment text (case-insensitive) that counts as an approval",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Report Defaults
    # --------------------------------------------------------------------------
    report: ReportSettings = Field(
        default_factory=ReportSettings,
        description="Report command defaults (REPORT__RESULTS_DIR, ...)",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


class ReportConfig(BaseModel):
    """Everything one report invocation needs, resolved once at startup.

    Built by the CLI from flags and Settings, then passed by parameter
    to every function that needs it.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1, description="GitHub user or organization name")
    repo: str | None = Field(default=None, description="Restrict to a single repository")
    pr_number: int | None = Field(default=None, ge=1, description="Restrict to a single PR")
    since: datetime | None = Field(
        default=None, description="Skip PRs merged before this datetime"
    )
    state: Literal["open", "closed", "all"] = Field(
        default="closed", description="PR state to list"
    )
    results_dir: Path = Field(default=Path("results"))
    repo_cache_file: Path = Field(default=Path("repos.txt"))
    pull_per_page: int = Field(default=50, ge=1, le=100)
    review_per_page: int = Field(default=100, ge=1, le=100)
    lgtm_marker: str = Field(default="LGTM", min_length=1)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: object) -> "ReportConfig":
        """Fill file locations and page sizes from settings; flags go in ``overrides``."""
        report = settings.report
        cache_file = report.repo_cache_file.format(owner=overrides.get("owner", ""))
        defaults: dict[str, object] = {
            "results_dir": Path(report.results_dir),
            "repo_cache_file": Path(cache_file),
            "pull_per_page": report.pull_per_page,
            "review_per_page": report.review_per_page,
            "lgtm_marker": report.lgtm_marker,
        }
        return cls.model_validate(defaults | overrides)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
