import base64
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from vercel_source import utils
from vercel_source.config import Settings
from vercel_source.constants import (
    LOG_LEVEL_ENV_VAR,
    MAX_CONCURRENT_ENV_VAR,
    TEAM_ENV_VAR,
    TOKEN_ENV_VAR,
)
from vercel_source.download.async_client import AsyncVercelClient
from vercel_source.exceptions import TransportError

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)

async def _async_block_network(*_args, **_kwargs):
    """
    Prevent async network calls during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG`.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used across the suite."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "core_downloads: download pipeline tests")
    config.addinivalue_line("markers", "user_interface: command-line tests")


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing aiohttp entry points.
    """
    import aiohttp

    aiohttp.request = _async_block_network
    aiohttp.ClientSession._request = _async_block_network  # type: ignore[assignment]


@pytest.fixture(autouse=True)
def _isolate_test_environment(monkeypatch):
    """
    Remove Vercel-related environment variables, skip .env loading and reset request counters.
    """
    for name in (TOKEN_ENV_VAR, TEAM_ENV_VAR, LOG_LEVEL_ENV_VAR, MAX_CONCURRENT_ENV_VAR):
        monkeypatch.delenv(name, raising=False)

    import vercel_source.cli as cli

    monkeypatch.setattr(cli, "load_dotenv", lambda *_args, **_kwargs: False)
    utils.reset_api_tracking()


# =============================================================================
# Async Test Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings with a test token and a small concurrency limit."""
    return Settings(token="test-token", max_concurrent=4)  # noqa: S106


@pytest.fixture
def mock_async_response():
    """
    Provide a factory for mocked aiohttp responses.

    The factory sets `status`, an async `read()` returning `body`, and an
    async `json()` returning `json_data` (or raising ValueError when None).
    """

    def _create_response(status=200, body=b"", json_data=None):
        response = MagicMock()
        response.status = status
        response.read = AsyncMock(return_value=body)
        if json_data is None:
            response.json = AsyncMock(side_effect=ValueError("no json"))
        else:
            response.json = AsyncMock(return_value=json_data)
        return response

    return _create_response


@pytest.fixture
def make_session():
    """
    Provide a factory for mocked aiohttp sessions whose `get()` yields `response`.
    """

    def _create_session(response=None, error=None):
        session = MagicMock()
        session.closed = False
        session.close = AsyncMock()
        if error is not None:
            session.get = MagicMock(side_effect=error)
        else:
            ctx = MagicMock()
            ctx.__aenter__ = AsyncMock(return_value=response)
            ctx.__aexit__ = AsyncMock(return_value=False)
            session.get = MagicMock(return_value=ctx)
        return session

    return _create_session


@pytest.fixture
def api_routes() -> Dict[str, Any]:
    """Mapping of request path to JSON payload (or exception) served by `fake_client`."""
    return {}


@pytest.fixture
def fake_client(settings, api_routes):
    """
    AsyncVercelClient whose `get_json` serves `api_routes`.

    Unknown paths raise a 404 TransportError, like the real API.
    """
    client = AsyncVercelClient(settings)

    async def _get_json(path):
        if path not in api_routes:
            raise TransportError(
                f"HTTP error 404 for {path}", endpoint=path, status_code=404
            )
        value = api_routes[path]
        if isinstance(value, BaseException):
            raise value
        return value

    client.get_json = AsyncMock(side_effect=_get_json)
    return client


def _encode_content(text: str) -> Dict[str, str]:
    return {"data": base64.b64encode(text.encode()).decode()}


@pytest.fixture
def encode_content():
    """Provide a builder for file content payloads shaped like the API's."""
    return _encode_content


@pytest.fixture
def sample_listing():
    """
    Deployment listing whose `src` holds a.txt (u1) and pkg/b.txt (u2).
    """
    return [
        {"name": "out", "type": "directory", "children": []},
        {
            "name": "src",
            "type": "directory",
            "children": [
                {"name": "a.txt", "type": "file", "uid": "u1"},
                {
                    "name": "pkg",
                    "type": "directory",
                    "children": [{"name": "b.txt", "type": "file", "uid": "u2"}],
                },
            ],
        },
    ]


@pytest.fixture
def sample_routes(api_routes, sample_listing):
    """Populate `api_routes` for deployment dpl_abc123 behind example.vercel.app."""
    api_routes.update(
        {
            "/v13/deployments/example.vercel.app": {"id": "dpl_abc123"},
            "/v6/deployments/dpl_abc123/files": sample_listing,
            "/v7/deployments/dpl_abc123/files/u1": _encode_content("alpha"),
            "/v7/deployments/dpl_abc123/files/u2": _encode_content("beta"),
        }
    )
    return api_routes
