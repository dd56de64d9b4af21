"""Provider configuration.

`ForemanConfig` is a process-wide singleton. Values are taken from, in
order of precedence:

1. keyword arguments
2. environment variables prefixed with `FOREMAN_`
3. the `[foreman]` section of the first INI files found in `DEFAULT_CONFIG_PATH`
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Annotated, Any, ClassVar, Self

from pydantic import AfterValidator, Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from typing_extensions import override

from foreman_provider.dirs import DEFAULT_CONFIG_PATH
from foreman_provider.exceptions import InputFailure
from foreman_provider.types import LogLevel
from foreman_provider.utilities.fs import get_writable_file_or_tempfile, to_path

logger = logging.getLogger(__name__)

INI_SECTION = "foreman"


class IniConfigSettingsSource(InitSettingsSource):
    """Settings source for the `[foreman]` section of INI config files.

    When several files define the same key, the file listed first in
    `DEFAULT_CONFIG_PATH` wins.
    """

    def __init__(self, settings_cls: type[BaseSettings]):
        self.paths: list[Path] = []
        """Config files that were read, lowest precedence first."""

        super().__init__(settings_cls, self._load(DEFAULT_CONFIG_PATH))

    def _load(self, candidates: tuple[Path, ...]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for candidate in reversed(candidates):
            try:
                path = to_path(candidate)
            except InputFailure as e:
                logger.warning("Skipping config file %s: %s", candidate, e)
                continue
            if not path.is_file():
                continue

            parser = configparser.ConfigParser()
            try:
                parser.read(path)
            except configparser.Error as e:
                logger.error("Failed to parse config file %s: %s", path, e)
                continue
            if not parser.has_section(INI_SECTION):
                logger.warning("Config file %s has no [%s] section", path, INI_SECTION)
                continue

            values.update(parser.items(INI_SECTION))
            self.paths.append(path)
            logger.info("Loaded config file %s", path)
        return values

    @override
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(paths={self.paths!r})"


def _resolve_path(value: Path | None) -> Path | None:
    return None if value is None else to_path(value)


ResolvedPath = Annotated[Path, AfterValidator(_resolve_path)]
"""Path that is user expanded (~) and resolved after validation."""


class ForemanConfig(BaseSettings):
    """Configuration singleton for the provider."""

    url: str = "https://foreman.example.com"
    user: str = ""
    password: SecretStr = SecretStr("")
    api_path: str = "/api"
    http_timeout: int = Field(default=20, ge=0)
    verify_ssl: bool = True
    retry_count: int = Field(default=1, ge=1)
    retry_backoff: float = Field(default=0.5, ge=0)
    retry_backoff_max: float = Field(default=8.0, ge=0)
    log_file: ResolvedPath | None = None
    log_level: LogLevel = LogLevel.INFO

    model_config = SettingsConfigDict(
        env_prefix="FOREMAN_",
        validate_assignment=True,
        extra="ignore",
    )

    _instance: ClassVar[Self | None] = None
    _init: ClassVar[bool] = False
    """Set once the sources have been loaded into the instance."""
    _sources: ClassVar[tuple[PydanticBaseSettingsSource, ...]] = ()

    def __new__(cls, **kwargs: Any) -> Self:
        if cls._instance is None:
            cls._reset_instance()
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, **kwargs: Any) -> None:
        # Re-running BaseSettings.__init__ would reload every source and
        # clobber values assigned since.
        if self._init:
            return
        super().__init__(**kwargs)
        type(self)._init = True

    @classmethod
    def _reset_instance(cls) -> None:
        cls._instance = None
        cls._init = False
        cls._sources = ()

    @field_validator("api_path")
    @classmethod
    def _normalize_api_path(cls, v: str) -> str:
        """Leading slash, no trailing slash. Empty means the API is at the root."""
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    @field_validator("log_file", mode="after")
    @classmethod
    def _ensure_log_file_writable(cls, v: Path | None) -> Path | None:
        if v is None:
            return None
        try:
            return get_writable_file_or_tempfile(v)
        except OSError as e:
            logger.error("No usable log file, logging to stderr: %s", e)
            return None

    @override
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        cls._sources = (init_settings, env_settings, IniConfigSettingsSource(settings_cls))
        return cls._sources

    @classmethod
    def get_default_config(cls) -> Self:
        """Build a config from the defaults alone, without reading any source.

        Also drops the current singleton.
        """
        cls._reset_instance()
        return cls.model_construct()

    @property
    def api_url(self) -> str:
        """Base URL of the API, without a trailing slash."""
        return f"{self.url.rstrip('/')}{self.api_path}"
