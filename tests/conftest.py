"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
import requests


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """The CLI reconfigures root logging; undo it between tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


_SETTINGS_ENV_VARS = (
    "LINEAR_OAUTH_ID",
    "LINEAR_OAUTH_SECRET",
    "GITHUB_OAUTH_ID",
    "GITHUB_OAUTH_SECRET",
    "LINEAR_TOKEN",
    "SYNC_GITHUB_TOKEN",
    "LINEAR_IP_ORIGINS",
    "APP_URL",
    "SYNC_API_URL",
    "GITHUB_BASE_URL",
    "LINEAR_GRAPHQL_URL",
    "ENCRYPTION_KEY",
    "NODE_ENV",
    "LOG_LEVEL",
    "SYNC_CORS_ORIGINS",
)


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with none of the bridge's variables set."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def make_response(payload: Any, status_code: int = 200) -> Mock:
    """A stand-in for ``requests.Response``."""
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error")
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def response() -> Callable[..., Mock]:
    return make_response


@pytest.fixture
def session() -> Mock:
    """A mocked ``requests.Session`` with a real headers dict."""
    mock = Mock()
    mock.headers = {}
    return mock
