"""Logging setup for the provider.

Modules log through `logging.getLogger(__name__)`. Nothing is emitted
until a caller enables output with `ForemanLogger().start_logging()`.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NamedTuple, Self

from foreman_provider.config import ForemanConfig
from foreman_provider.types import LogLevel

LOGGING_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s"
LOGGING_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


class LoggingStatus(NamedTuple):
    enabled: bool
    file: Path | None
    level: LogLevel

    def as_str(self) -> str:
        """E.g. "INFO > stderr", or "disabled"."""
        if not self.enabled:
            return "disabled"
        return f"{self.level} > {self.file or 'stderr'}"


class ForemanLogger:
    """Singleton owning the provider's log handler on the root logger."""

    _instance = None
    _is_logging: bool = False
    _file: Path | None = None
    _level: LogLevel = LogLevel.INFO
    _handler: logging.Handler | None = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def status(self) -> LoggingStatus:
        return LoggingStatus(self._is_logging, self._file, self._level)

    def start_logging(
        self,
        logfile: Path | None,
        level: LogLevel | str = LogLevel.INFO,
        fmt: str = LOGGING_FORMAT,
    ) -> None:
        """Log to `logfile`, or to stderr if it is None.

        Replaces the handler of a previous call.

        :raises OSError: If the log file can't be opened.
        """
        level = LogLevel(level)
        self.stop_logging()

        if logfile is None:
            handler: logging.Handler = logging.StreamHandler(sys.stderr)
        else:
            handler = logging.FileHandler(logfile, encoding="utf-8")
        handler.setFormatter(logging.Formatter(fmt, datefmt=LOGGING_DATEFMT))
        handler.setLevel(level.as_int())

        root = logging.getLogger()
        root.addHandler(handler)
        root.setLevel(level.as_int())

        self._handler = handler
        self._is_logging = True
        self._file = logfile
        self._level = level
        logger.info("Logging enabled: %s", self.status.as_str())

    def start_logging_from_config(self) -> None:
        """Start logging with the file and level of the active configuration."""
        config = ForemanConfig()
        self.start_logging(config.log_file, config.log_level)

    def stop_logging(self) -> None:
        """Detach and close our handler, if any."""
        if self._handler is not None:
            logging.getLogger().removeHandler(self._handler)
            self._handler.close()
            self._handler = None
        self._is_logging = False
        self._file = None
