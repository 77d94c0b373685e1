"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from loguru import logger

from github_review_report.logging import (
    _CONSOLE_FORMAT,
    bind_pr,
    bind_repo,
    get_logger,
    is_configured,
    reset_logging,
    setup_logging,
)

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Generator[None, None, None]:
    """Reset loguru state before and after each test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def captured() -> Generator[list[str], None, None]:
    """Collect formatted messages (with bound extras) after setup_logging."""
    messages: list[str] = []
    setup_logging(level="DEBUG")
    handler_id = logger.add(
        lambda msg: messages.append(str(msg)),
        format="{extra} | {message}",
    )
    yield messages
    logger.remove(handler_id)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default_level(self) -> None:
        """Test default INFO level setup."""
        setup_logging(level="INFO")
        assert is_configured()

    def test_setup_logging_verbose_overrides_level(self) -> None:
        """Test that verbose flag sets DEBUG level."""
        messages: list[str] = []
        setup_logging(level="WARNING", verbose=True)

        handler_id = logger.add(lambda msg: messages.append(str(msg)))
        try:
            logger.bind(name="test").debug("debug message")
            assert any("debug message" in msg for msg in messages)
        finally:
            logger.remove(handler_id)

    def test_console_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Progress logs never mix with report lines on stdout."""
        setup_logging(level="INFO")

        get_logger("test").info("progress message")

        captured = capsys.readouterr()
        assert "progress message" not in captured.out
        assert "progress message" in captured.err

    def test_quiet_filters_info(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="DEBUG", quiet=True)

        get_logger("test").info("chatty")
        get_logger("test").warning("rate limited")

        err = capsys.readouterr().err
        assert "chatty" not in err
        assert "rate limited" in err

    def test_setup_logging_with_file(self, tmp_path: Path) -> None:
        """Test file logging setup."""
        log_file = tmp_path / "ghreport.log"
        setup_logging(level="INFO", log_file=log_file)

        get_logger("test").info("Test file message")
        logger.complete()

        assert log_file.exists()
        assert "Test file message" in log_file.read_text()

    def test_setup_logging_sets_configured_flag(self) -> None:
        """Test that setup_logging sets the configured flag."""
        assert not is_configured()
        setup_logging(level="INFO")
        assert is_configured()


class TestInterceptHandler:
    """Tests for stdlib logging interception."""

    def test_intercept_stdlib_logging(self, captured: list[str]) -> None:
        """Test that stdlib logging is routed to loguru."""
        logging.getLogger("test_stdlib_intercept").warning("Hello from stdlib")

        assert any("Hello from stdlib" in msg for msg in captured)
        assert any("test_stdlib_intercept" in msg for msg in captured)

    def test_http_logging_quiet_unless_debug(self) -> None:
        """httpx request logs (one per API call) stay hidden at INFO."""
        setup_logging(level="INFO")
        assert logging.getLogger("httpx").level >= logging.WARNING

        setup_logging(level="INFO", verbose=True)
        assert logging.getLogger("httpx").level == logging.DEBUG


class TestContextBinding:
    """Tests for context binding helpers."""

    def test_get_logger_binds_name(self, captured: list[str]) -> None:
        get_logger("my_test_module").info("Test message")
        assert any("my_test_module" in msg for msg in captured)

    def test_bind_repo(self, captured: list[str]) -> None:
        bind_repo("m-lab", "ndt-server").info("Test repo message")
        assert any("m-lab/ndt-server" in msg for msg in captured)

    def test_bind_pr(self, captured: list[str]) -> None:
        bind_pr("m-lab", "ndt-server", 123).info("Test PR message")
        output = "".join(captured)
        assert "m-lab/ndt-server" in output
        assert "123" in output

    def test_brace_formatting(self, captured: list[str]) -> None:
        """Arguments are formatted with str.format placeholders."""
        get_logger("test").info("page {}: {} items", 2, 50)
        assert any("page 2: 50 items" in msg for msg in captured)


class TestLogLevels:
    """Tests for log level handling."""

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR"])
    def test_log_level_accepted(self, level: str) -> None:
        """Test that various log levels are accepted."""
        setup_logging(level=level)  # type: ignore[arg-type]
        assert is_configured()


class TestResetLogging:
    """Tests for reset_logging function."""

    def test_reset_logging_clears_configured(self) -> None:
        """Test that reset_logging clears the configured flag."""
        setup_logging(level="INFO")
        assert is_configured()

        reset_logging()
        assert not is_configured()


class TestReportContext:
    """Tests for the report name and scope shown on console lines."""

    def test_report_name_and_repo_scope(self, captured: list[str]) -> None:
        bind_repo("m-lab", "ndt-server", report="credits").info("Processing")
        assert any("'name': 'credits'" in msg for msg in captured)
        assert any("[m-lab/ndt-server]" in msg for msg in captured)

    def test_pr_scope(self, captured: list[str]) -> None:
        bind_pr("m-lab", "ndt-server", 42, report="reviews").info("Fetched")
        assert any("[m-lab/ndt-server#42]" in msg for msg in captured)

    def test_console_line_shows_scope(self) -> None:
        lines: list[str] = []
        setup_logging(level="INFO")
        handler_id = logger.add(lambda msg: lines.append(str(msg)), format=_CONSOLE_FORMAT)
        try:
            bind_repo("m-lab", "etl", report="credits").info("Done")
            get_logger("plain").info("No scope")
        finally:
            logger.remove(handler_id)

        assert "credits [m-lab/etl] - Done" in lines[0]
        assert "plain - No scope" in lines[1]
