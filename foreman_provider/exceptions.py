"""Custom exceptions for foreman_provider.

Errors (`ForemanError`) stem from failures the caller cannot resolve by
changing its input. Warnings (`ForemanWarning`) are recoverable, either by
retrying the request or by changing the input.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError
from requests import Response

logger = logging.getLogger(__name__)


class ForemanException(Exception):
    """Base exception class for the provider."""

    def log(self) -> None:
        """Log the exception."""
        logger.error(str(self))


class ForemanError(ForemanException):
    """Exception class for unrecoverable errors."""

    pass


class ForemanWarning(ForemanException):
    """Exception class for recoverable failures."""

    def log(self) -> None:
        """Log the exception."""
        logger.warning(str(self))


class RequestError(ForemanError):
    """Error class for requests that could not be constructed."""

    pass


class OperationFailed(ForemanError):
    """Error class for operations the server reports as failed."""

    pass


class TransportError(ForemanWarning):
    """Warning class for network failures (connection refused, timeouts, etc.)."""

    pass


class APIError(ForemanWarning):
    """Warning class for non-2xx API responses."""

    response: Response

    def __init__(self, message: str, response: Response):
        """Wrap a non-2xx response.

        :param message: Description of the failed request.
        :param response: The response received.
        """
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int:
        """HTTP status code of the response."""
        return self.response.status_code


class ValidationError(ForemanError):
    """Error class for responses that could not be decoded."""

    def __init__(self, message: str, pydantic_error: PydanticValidationError | None = None):
        super().__init__(message)
        self.pydantic_error = pydantic_error

    @classmethod
    def from_pydantic(cls, e: PydanticValidationError) -> ValidationError:
        """Describe a failed decode, including the request that produced the input.

        :param e: The error raised by pydantic.
        :returns: The wrapped error.
        """
        from foreman_provider.utilities.api import last_request_method, last_request_url

        header = f"Failed to validate {e.title}"
        method, url = last_request_method.get(), last_request_url.get()
        if method and url:
            header = f"{header} response from {method.upper()} {url}"

        details = e.errors(include_url=False)
        lines = [header, f"  Input: {details[0]['input'] if details else ''}", "  Errors:"]
        for detail in details:
            location = ", ".join(str(part) for part in detail["loc"])
            lines.append(f"    Field: {location}\n    Reason: {detail['msg']}")
        return cls("\n".join(lines), e)

    def log(self) -> None:
        """Log the exception with traceback."""
        logger.exception(str(self), exc_info=self)


class EntityNotFound(ForemanWarning):
    """Warning class for an entity that was not found."""

    pass


class MultipleEntitiesFound(ForemanWarning):
    """Warning class for multiple entities found where one was expected."""

    pass


class InputFailure(ForemanWarning, ValueError):
    """Warning class for invalid caller input."""

    pass
