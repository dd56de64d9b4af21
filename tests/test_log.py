from __future__ import annotations

import logging
from pathlib import Path

from inline_snapshot import snapshot
from pytest_httpserver import HTTPServer

from foreman_provider.api.models import Host
from foreman_provider.config import ForemanConfig
from foreman_provider.log import ForemanLogger
from foreman_provider.types import LogLevel


def test_logging_start(tmp_path: Path) -> None:
    logfile = tmp_path / "test.log"
    foreman_logger = ForemanLogger()
    foreman_logger.start_logging(logfile, "DEBUG")

    logger = logging.getLogger("test_logging_start")
    logger.debug("This is a debug message.")
    logger.info("This is an info message.")
    logger.warning("This is a warning message.")

    # Stop logging to flush the buffer to the file
    foreman_logger.stop_logging()
    logger.error("Not logged to the file.")

    text = logfile.read_text()
    # The status line plus the three messages above
    assert text.count("\n") == snapshot(4)
    assert f"Logging enabled: DEBUG > {logfile}" in text


def test_logging_level_filters(tmp_path: Path) -> None:
    logfile = tmp_path / "test.log"
    foreman_logger = ForemanLogger()
    foreman_logger.start_logging(logfile, LogLevel.WARNING)

    logger = logging.getLogger("test_logging_level_filters")
    logger.info("Filtered out.")
    logger.warning("Kept.")
    foreman_logger.stop_logging()

    lines = logfile.read_text().splitlines()
    assert len(lines) == 1
    assert " - WARNING  - test_logging_level_filters - Kept." in lines[0]


def test_logging_restart_replaces_handler(tmp_path: Path) -> None:
    first = tmp_path / "first.log"
    second = tmp_path / "second.log"
    foreman_logger = ForemanLogger()
    foreman_logger.start_logging(first, "INFO")
    foreman_logger.start_logging(second, "INFO")

    logging.getLogger("test_logging_restart").info("Only in the second file.")
    foreman_logger.stop_logging()

    assert first.read_text().count("\n") == 1
    assert "Logging enabled: INFO > " in first.read_text()
    assert "Only in the second file." not in first.read_text()
    assert second.read_text().count("\n") == 2
    assert "Only in the second file." in second.read_text()


def test_logging_from_config(tmp_path: Path, default_conf: ForemanConfig) -> None:
    default_conf.log_file = tmp_path / "foreman.log"  # pyright: ignore[reportAttributeAccessIssue]
    default_conf.log_level = LogLevel.ERROR
    foreman_logger = ForemanLogger()
    foreman_logger.start_logging_from_config()
    assert foreman_logger.status.level == LogLevel.ERROR
    assert foreman_logger.status.file == tmp_path / "foreman.log"


def test_requests_are_logged(tmp_path: Path, httpserver: HTTPServer) -> None:
    logfile = tmp_path / "requests.log"
    foreman_logger = ForemanLogger()
    foreman_logger.start_logging(logfile, "INFO")

    httpserver.expect_oneshot_request("/api/hosts/1").respond_with_json({"id": 1, "name": "h1"})
    Host.read(1)
    foreman_logger.stop_logging()

    text = logfile.read_text()
    assert f"Request: GET {httpserver.url_for('/api/hosts/1')}" in text
    assert f"Response: GET {httpserver.url_for('/api/hosts/1')} 200" in text


def test_foremanlogger_singleton() -> None:
    assert ForemanLogger() is ForemanLogger()
    assert ForemanLogger().status == ForemanLogger().status


def test_foremanlogger_status_as_str_stderr() -> None:
    logger = ForemanLogger()
    logger.start_logging(None, "INFO")
    assert logger.status.as_str() == snapshot("INFO > stderr")


def test_foremanlogger_status_as_str_file(tmp_path: Path) -> None:
    logger = ForemanLogger()
    logger.start_logging(tmp_path / "test.log", "DEBUG")
    assert logger.status.as_str().startswith("DEBUG > /")

    logger._file = Path("/path/to/logfile.log")
    assert logger.status.as_str() == snapshot("DEBUG > /path/to/logfile.log")


def test_foremanlogger_status_as_str_disabled() -> None:
    logger = ForemanLogger()
    logger.stop_logging()
    assert logger.status.as_str() == snapshot("disabled")
