from __future__ import annotations

import logging

import pytest
import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from foreman_provider.exceptions import (
    APIError,
    EntityNotFound,
    ForemanError,
    ForemanException,
    ForemanWarning,
    InputFailure,
    MultipleEntitiesFound,
    OperationFailed,
    RequestError,
    TransportError,
    ValidationError,
)
from foreman_provider.utilities.api import last_request_method, last_request_url


class Organization(BaseModel):
    id: int
    name: str


@pytest.mark.parametrize(
    "exc_type,base",
    [
        (RequestError, ForemanError),
        (OperationFailed, ForemanError),
        (ValidationError, ForemanError),
        (TransportError, ForemanWarning),
        (APIError, ForemanWarning),
        (EntityNotFound, ForemanWarning),
        (MultipleEntitiesFound, ForemanWarning),
        (InputFailure, ForemanWarning),
        (InputFailure, ValueError),
    ],
)
def test_hierarchy(exc_type: type[Exception], base: type[Exception]) -> None:
    assert issubclass(exc_type, base)
    assert issubclass(exc_type, ForemanException)


def test_query_errors_are_distinct() -> None:
    assert not issubclass(EntityNotFound, MultipleEntitiesFound)
    assert not issubclass(MultipleEntitiesFound, EntityNotFound)


def test_api_error_status_code() -> None:
    resp = requests.Response()
    resp.status_code = 409
    err = APIError("conflict", resp)
    assert err.status_code == 409
    assert err.response is resp


def test_validation_error_from_pydantic() -> None:
    last_request_method.set("get")
    last_request_url.set("https://foreman.test/api/organizations/1")
    with pytest.raises(PydanticValidationError) as exc_info:
        Organization.model_validate({"id": "one"})

    err = ValidationError.from_pydantic(exc_info.value)
    assert err.pydantic_error is exc_info.value
    msg = str(err)
    assert msg.startswith(
        "Failed to validate Organization response from GET https://foreman.test/api/organizations/1"
    )
    assert "Field: id" in msg
    assert "Field: name" in msg


def test_validation_error_from_pydantic_no_request() -> None:
    with pytest.raises(PydanticValidationError) as exc_info:
        Organization.model_validate({"id": 1})
    err = ValidationError.from_pydantic(exc_info.value)
    assert str(err).startswith("Failed to validate Organization\n")


def test_log_levels(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="foreman_provider.exceptions"):
        OperationFailed("power failed").log()
        EntityNotFound("no such host").log()
    assert [(r.levelname, r.message) for r in caplog.records] == [
        ("ERROR", "power failed"),
        ("WARNING", "no such host"),
    ]
