"""Custom field types for Pydantic models.

The types validate to basic types (int, list[int]) but carry the wire
conventions of the Foreman API with them.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, PlainSerializer

logger = logging.getLogger(__name__)


def parse_foreign_key(value: Any) -> int | None:
    """Parse a foreign key value received from the API or a caller.

    Numeric values and numeric strings become integers. Anything else
    (None, empty string, non-numeric, non-positive) means "unset".

    :param value: The raw value.
    :returns: The referenced ID, or None if unset.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, str):
        value = value.strip()
        # isdigit() also accepts characters like "²" that int() rejects
        if not value.isdecimal():
            return None
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def dump_foreign_key(value: int | None) -> str:
    """Serialize a foreign key for the API.

    Unset keys are sent as an empty string, which the API treats as
    "clear this association". A literal 0 is rejected by the API, and an
    omitted key leaves the association unchanged on update.
    """
    if not value:
        return ""
    return str(value)


ForeignKey = Annotated[
    int | None,
    BeforeValidator(parse_foreign_key),
    PlainSerializer(dump_foreign_key, return_type=str),
]
"""Optional reference to another entity. `None` is unset and serializes as `""`."""


def _extract_id(value: Any) -> Any:
    """Extract the "id" value from a nested object.

    :param value: Nested object (dict) or bare ID.
    :returns: The ID, or the value unchanged if it is not a dict.
    """
    if isinstance(value, dict):
        try:
            return value["id"]  # pyright: ignore[reportUnknownVariableType]
        except KeyError:
            logger.error("No 'id' key in %s", value)  # pyright: ignore[reportUnknownArgumentType]
            return None
    return value


def _none_as_empty_list(value: Any) -> Any:
    """Treat a null list as an empty list."""
    return value or []


def _remove_none_list_items(value: Any) -> Any:
    """Drop list items that could not be resolved to an ID."""
    if isinstance(value, list):
        return [i for i in value if i is not None]  # pyright: ignore[reportUnknownVariableType]
    return value


IdList = Annotated[
    list[Annotated[int | None, BeforeValidator(_extract_id)]],
    BeforeValidator(_none_as_empty_list),
    AfterValidator(_remove_none_list_items),
]
"""List of IDs projected from a list of nested objects, in server order."""


def _convert_to_str(value: Any) -> str:
    """Convert a value to a string, spelling booleans the way JSON does."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


ForcedStr = Annotated[str, BeforeValidator(_convert_to_str)]
"""Field that converts everything to a string. None is converted to an empty string,
booleans to "true" or "false"."""


def _none_as_false(value: Any) -> Any:
    """Treat a null boolean as False."""
    if value is None:
        return False
    return value


ForcedBool = Annotated[bool, BeforeValidator(_none_as_false)]
"""Boolean field where None is False."""

OptionalId = Annotated[int | None, BeforeValidator(parse_foreign_key)]
"""Optional ID that is omitted from the payload when unset rather than sent as `""`."""
