"""Parsing of error bodies returned by Foreman.

Foreman reports failures as `{"error": {...}}`. Validation failures
(422) list every problem in `full_messages`, other failures carry a
single `message`.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ValidationError
from requests import Response

logger = logging.getLogger(__name__)


class ForemanErrorDetail(BaseModel):
    id: int | None = None  # noqa: A003
    message: str | None = None
    full_messages: list[str] = []

    def fmt_error(self) -> str:
        if self.full_messages:
            return "; ".join(self.full_messages)
        return self.message or ""


class ForemanErrorResponse(BaseModel):
    """An error body."""

    error: ForemanErrorDetail

    def as_str(self) -> str:
        """One-line summary of the error."""
        return self.error.fmt_error()

    def as_json_str(self, indent: int = 2) -> str:
        """The error body as indented JSON, without null fields."""
        return self.model_dump_json(indent=indent, exclude_none=True)


def parse_foreman_error(resp: Response) -> ForemanErrorResponse | None:
    """Parse the body of a failed response.

    :returns: The parsed error, or None if the body is not a Foreman error.
    """
    try:
        return ForemanErrorResponse.model_validate_json(resp.text)
    except ValidationError:
        logger.debug("Not a Foreman error body from %s: %r", resp.url, resp.text)
    return None
