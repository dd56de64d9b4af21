"""Directory and file paths for the provider."""

from __future__ import annotations

import logging
from pathlib import Path

import platformdirs

logger = logging.getLogger(__name__)

_pdirs = platformdirs.PlatformDirs(appname="foreman-provider", appauthor=False)


CONFIG_DIR = _pdirs.user_config_path
CONFIG_FILE_NAME = "foreman-provider.conf"
CONFIG_FILE_DEFAULT = CONFIG_DIR / CONFIG_FILE_NAME
"""Default config file path."""

# Config file locations, ordered by precedence
DEFAULT_CONFIG_PATH: tuple[Path, ...] = (
    CONFIG_FILE_DEFAULT,
    # Unresolved to avoid issues if home dir is not available
    Path("~") / ".config" / CONFIG_FILE_NAME,
    _pdirs.site_config_path / CONFIG_FILE_NAME,
    Path("/etc") / CONFIG_FILE_NAME,
)
