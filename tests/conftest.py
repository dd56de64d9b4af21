from __future__ import annotations

import os
import unittest.mock
from collections.abc import Iterator

import pytest
from pytest_httpserver import HTTPServer

from foreman_provider.config import ForemanConfig
from foreman_provider.log import ForemanLogger
from foreman_provider.utilities.api import (
    clear_session_auth,
    last_request_method,
    last_request_url,
)


@pytest.fixture(autouse=True)
def reset_os_environ() -> Iterator[None]:
    """Restore os.environ after each test."""
    with unittest.mock.patch.dict(os.environ):
        yield


@pytest.fixture(autouse=True)
def default_conf(httpserver: HTTPServer) -> Iterator[ForemanConfig]:
    """Install a config built from defaults only, pointed at the test server.

    Backoff is disabled so retries don't sleep.
    """
    conf = ForemanConfig.get_default_config()
    # Mark as loaded so no INI file or environment is read
    ForemanConfig._instance = conf
    ForemanConfig._init = True
    conf.url = httpserver.url_for("/")
    conf.retry_backoff = 0
    try:
        yield conf
    finally:
        ForemanConfig._reset_instance()


@pytest.fixture(autouse=True)
def reset_state() -> Iterator[None]:
    """Reset module-level state tests may have touched."""
    yield
    last_request_method.set(None)
    last_request_url.set(None)
    clear_session_auth()
    ForemanLogger().stop_logging()
