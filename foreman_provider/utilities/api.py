"""HTTP transport for foreman_provider.

Requests are built with `new_request()` and sent with `send_and_parse()`,
which performs the HTTP exchange, checks the status code and decodes the
JSON body into the requested type. `send_with_retry()` wraps the latter
with the retry policy for mutating operations.
"""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from typing import TypeVar, overload

import requests
from pydantic import ValidationError as PydanticValidationError
from requests import PreparedRequest, Response

from foreman_provider.__about__ import __version__
from foreman_provider.api.errors import parse_foreman_error
from foreman_provider.config import ForemanConfig
from foreman_provider.exceptions import (
    APIError,
    ForemanException,
    InputFailure,
    RequestError,
    TransportError,
    ValidationError,
)
from foreman_provider.types import HTTPMethod, JsonMapping, QueryParams, get_type_adapter

session = requests.Session()
session.headers.update(
    {
        "User-Agent": f"foreman-provider-{__version__}",
        "Accept": "application/json",
    }
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Context variables for storing the last request URL and method.
last_request_url: ContextVar[str | None] = ContextVar("last_request_url", default=None)
last_request_method: ContextVar[str | None] = ContextVar("last_request_method", default=None)


def set_session_auth(user: str, password: str) -> None:
    """Use HTTP basic authentication for all requests in the session.

    :param user: The username to authenticate as.
    :param password: The password of the user.
    """
    session.auth = (user, password)


def clear_session_auth() -> None:
    """Remove authentication from the session."""
    session.auth = None


def configure_session_from_config() -> None:
    """Apply credentials from the active configuration to the session."""
    config = ForemanConfig()
    if config.user:
        set_session_auth(config.user, config.password.get_secret_value())
    else:
        clear_session_auth()


def build_url(path: str) -> str:
    """Join a path relative to the API root with the configured API URL."""
    if path.startswith(("http://", "https://")):
        return path
    return f"{ForemanConfig().api_url}/{path.lstrip('/')}"


def new_request(
    method: HTTPMethod,
    path: str,
    body: JsonMapping | None = None,
    params: QueryParams | None = None,
) -> PreparedRequest:
    """Build a request against the API.

    :param method: The HTTP method.
    :param path: Path relative to the API root, e.g. `hosts/42`.
    :param body: JSON body to send, if any.
    :param params: Query string parameters.

    :raises RequestError: If the request cannot be constructed.

    :returns: The prepared request.
    """
    url = build_url(path)
    try:
        req = requests.Request(
            method,
            url,
            json=body,
            params={k: v for k, v in (params or {}).items() if v is not None},
        )
        return session.prepare_request(req)
    except (requests.exceptions.RequestException, ValueError, TypeError) as e:
        raise RequestError(f"Unable to build {method} request for {url}: {e}") from e


def result_check(result: Response, method: str, url: str) -> None:
    """Check the result of a request.

    :raises APIError: If the response status is not 2xx.
    """
    if not result.ok:
        if err := parse_foreman_error(result):
            res_text = err.as_str()
            logger.debug("Error body from %s %s:\n%s", method, url, err.as_json_str())
        else:
            res_text = result.text
        message = f'{method} "{url}": {result.status_code}: {result.reason}\n{res_text}'
        raise APIError(message, result)


@overload
def send_and_parse(request: PreparedRequest, type_: type[T]) -> T: ...


@overload
def send_and_parse(request: PreparedRequest, type_: None = None) -> None: ...


def send_and_parse(request: PreparedRequest, type_: type[T] | None = None) -> T | None:
    """Send a request and decode the response body into the given type.

    :param request: The request to send.
    :param type_: The type to decode the response into. None discards the body.

    :raises TransportError: If the request could not be sent.
    :raises APIError: If the response status is not 2xx.
    :raises ValidationError: If the response cannot be decoded into `type_`.

    :returns: The decoded response, or None if `type_` is None.
    """
    method = str(request.method)
    url = str(request.url)

    logger.info("Request: %s %s", method, url)
    if request.body:
        logger.debug("Data: %s", request.body)

    last_request_url.set(url)
    last_request_method.set(method)

    config = ForemanConfig()
    try:
        result = session.send(request, timeout=config.http_timeout, verify=config.verify_ssl)
    except requests.exceptions.RequestException as e:
        logger.warning("Request failed: %s %s: %s", method, url, e)
        raise TransportError(f"{method} {url}: {e}") from e

    log_message = f"Response: {method} {url} {result.status_code}"
    if result.status_code >= 300:
        logger.warning(log_message)
    else:
        logger.info(log_message)

    result_check(result, method, url)

    if type_ is None:
        return None

    logger.debug("Response data: %s", result.text)
    try:
        return get_type_adapter(type_).validate_json(result.text)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def is_retryable(exc: ForemanException) -> bool:
    """Determine if a failed request is worth retrying.

    Network failures and server-side (5xx) errors are transient. Client
    errors (4xx) and undecodable responses will fail the same way again.
    """
    if isinstance(exc, TransportError):
        return True
    if isinstance(exc, APIError):
        return exc.status_code >= 500
    return False


def backoff_delay(attempt: int) -> float:
    """Get the delay before the next attempt after `attempt` failed attempts."""
    config = ForemanConfig()
    return min(config.retry_backoff * 2 ** (attempt - 1), config.retry_backoff_max)


@overload
def send_with_retry(request: PreparedRequest, type_: type[T], retry_count: int | None = ...) -> T: ...


@overload
def send_with_retry(
    request: PreparedRequest, type_: None = None, retry_count: int | None = ...
) -> None: ...


def send_with_retry(
    request: PreparedRequest,
    type_: type[T] | None = None,
    retry_count: int | None = None,
) -> T | None:
    """Send a request, retrying transient failures.

    :param request: The request to send.
    :param type_: The type to decode the response into.
    :param retry_count: Maximum number of attempts. Defaults to the configured value.

    :raises InputFailure: If `retry_count` is less than 1.
    :raises ForemanException: The last error once the attempts are exhausted,
        or the first non-retryable error.

    :returns: The decoded response.
    """
    if retry_count is None:
        retry_count = ForemanConfig().retry_count
    if retry_count < 1:
        raise InputFailure(f"Retry count must be at least 1, got {retry_count}.")

    attempt = 0
    while True:
        attempt += 1
        try:
            return send_and_parse(request, type_)
        except (TransportError, APIError, ValidationError) as e:
            if not is_retryable(e) or attempt >= retry_count:
                raise
            delay = backoff_delay(attempt)
            logger.warning(
                "Attempt %d/%d of %s %s failed, retrying in %.2fs: %s",
                attempt,
                retry_count,
                request.method,
                request.url,
                delay,
                e,
            )
            if delay:
                time.sleep(delay)
