"""Shared type definitions."""

from __future__ import annotations

import logging
from enum import StrEnum
from functools import lru_cache
from typing import Any, Literal, Mapping, MutableMapping, TypeAlias, TypeVar

from pydantic import TypeAdapter

HTTPMethod: TypeAlias = Literal["GET", "POST", "PUT", "DELETE"]

JsonMapping: TypeAlias = Mapping[str, Any]
"""A JSON object, as sent in a request body."""

QueryParams: TypeAlias = MutableMapping[str, str | int | None]
"""Query string parameters. Parameters set to None are not sent."""


class LogLevel(StrEnum):
    """Log levels accepted in the configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def _missing_(cls, value: Any) -> LogLevel:
        """Look up levels case-insensitively."""
        if isinstance(value, str):
            for member in cls:
                if member.value == value.upper():
                    return member
        from foreman_provider.exceptions import InputFailure  # noqa: PLC0415

        raise InputFailure(f"Invalid log level: {value}")

    @classmethod
    def choices(cls) -> list[str]:
        return [str(level) for level in cls]

    def as_int(self) -> int:
        """The numeric level used by the `logging` module."""
        return logging.getLevelNamesMapping()[self.value]


T = TypeVar("T")


@lru_cache(maxsize=100)
def get_type_adapter(t: type[T]) -> TypeAdapter[T]:
    """Get a (cached) type adapter for decoding responses into `t`."""
    return TypeAdapter(t)
