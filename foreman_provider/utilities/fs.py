"""File system helpers."""

from __future__ import annotations

import functools
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from foreman_provider.exceptions import InputFailure

logger = logging.getLogger(__name__)


def get_writable_file_or_tempfile(path: Path) -> Path:
    """Make sure `path` is a writable file, creating it and its parents if needed.

    Falls back to a file with the same name in the provider's temporary
    directory when `path` can't be used.

    :param path: The desired file path.
    :raises OSError: If the temporary file can't be used either.
    :returns: `path`, or the temporary file used in its place.
    """
    try:
        if path.is_dir():
            raise IsADirectoryError(f"{path} is a directory")
        path.parent.mkdir(parents=True, exist_ok=True)
        check_writable(path)
        return path
    except OSError as e:
        logger.error("Unable to write to %s: %s", path, e)

    fallback = get_temp_dir() / (path.name or "foreman-provider.log")
    try:
        check_writable(fallback)
    except OSError as e:
        raise OSError(f"Unable to write to temporary file {fallback}: {e}") from e
    logger.warning("Using temporary file %s instead of %s", fallback, path)
    return fallback


def check_writable(path: Path) -> None:
    """Open the file for appending, creating it if missing."""
    with path.open("a"):
        pass


@functools.cache
def get_temp_dir() -> Path:
    """Temporary directory for this process, created on first use."""
    return Path(tempfile.mkdtemp(prefix="foreman-provider.", suffix=f".{os.getpid()}"))


def to_path(value: Any) -> Path:
    """Convert a value to an absolute Path, expanding `~` where possible.

    :raises InputFailure: If the value is not a valid path.
    """
    try:
        path = Path(value)
    except TypeError as e:
        raise InputFailure(f"Invalid path {value!r}: {e}") from e
    try:
        path = path.expanduser()
    except RuntimeError:
        # No home directory to expand to
        pass
    return path.resolve()
