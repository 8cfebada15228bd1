"""
Async HTTP Client for vercel-source-downloader

This module provides asynchronous access to the Vercel REST API using
aiohttp, with a single pooled session per run, bearer authentication and
structured error reporting. Requests are single-shot: failures surface to
the caller as TransportError without retrying.
"""

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional
from urllib.parse import quote, urlencode

import aiohttp
from aiohttp import ClientResponse, ClientSession, ClientTimeout, TCPConnector

from vercel_source.config import Settings
from vercel_source.constants import TEAM_ID_QUERY_PARAM
from vercel_source.exceptions import APIError, TransportError
from vercel_source.log_utils import logger
from vercel_source.utils import get_user_agent, track_api_request

HTTP_STATUS_ERROR_THRESHOLD = 400


class AsyncVercelClient:
    """
    Asynchronous Vercel API client using aiohttp.

    Example:
        async with AsyncVercelClient(settings) as client:
            listing = await client.get_json(
                client.build_path(DEPLOYMENT_FILES_PATH, deployment_id="dpl_x")
            )
    """

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the client.

        Parameters:
            settings (Settings): Credential, team scope, API root and limits for this run.
        """
        self.settings = settings
        self.base_url = settings.api_base_url.rstrip("/")
        self.timeout = ClientTimeout(total=settings.request_timeout)
        self._session: Optional[ClientSession] = None
        self._closed: bool = False

    async def __aenter__(self) -> "AsyncVercelClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        """
        Ensure a session exists, creating one if needed.

        Returns:
            ClientSession: The active aiohttp session.
        """
        if self._session is None or self._session.closed:
            connector = TCPConnector(
                limit_per_host=self.settings.max_concurrent,
                enable_cleanup_closed=True,
            )
            self._session = ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers=self._get_default_headers(),
            )
        return self._session

    def _get_default_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.settings.token}",
            "User-Agent": get_user_agent(),
        }

    async def close(self) -> None:
        """Close the client session and release resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._closed = True

    def build_path(self, template: str, team_scoped: bool = True, **params: str) -> str:
        """
        Fill an endpoint template, quoting each parameter as a single path segment.

        Parameters:
            template (str): Endpoint template such as "/v6/deployments/{deployment_id}/files".
            team_scoped (bool): Append `?teamId=` when the settings carry a team id.
            **params: Values substituted into the template.

        Returns:
            str: The request path relative to the API root.
        """
        path = template.format(
            **{key: quote(str(value), safe="") for key, value in params.items()}
        )
        if team_scoped and self.settings.team_id:
            path = f"{path}?{urlencode({TEAM_ID_QUERY_PARAM: self.settings.team_id})}"
        return path

    async def _error_details(self, response: ClientResponse) -> Optional[str]:
        """Extract the API's error message from a failed response body, if present."""
        try:
            payload = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError):
            return None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
        return None

    async def get_bytes(self, path: str) -> bytes:
        """
        Perform one GET request and return the raw response body.

        Parameters:
            path (str): Request path relative to the API root (see build_path).

        Returns:
            bytes: The response body.

        Raises:
            TransportError: On HTTP status >= 400 (with `status_code`) or on
                network failures and timeouts (without `status_code`).
        """
        session = await self._ensure_session()
        url = f"{self.base_url}{path}"

        try:
            async with session.get(url) as response:
                if response.status >= HTTP_STATUS_ERROR_THRESHOLD:
                    track_api_request(failed=True)
                    details = await self._error_details(response)
                    logger.debug(f"HTTP {response.status} from {path}: {details}")
                    raise TransportError(
                        f"HTTP error {response.status} for {path}",
                        endpoint=path,
                        status_code=response.status,
                        details=details,
                    )
                body = await response.read()
        except aiohttp.ClientError as e:
            track_api_request(failed=True)
            logger.debug(f"Network error requesting {path}: {e}")
            raise TransportError(
                f"Network error for {path}: {e}", endpoint=path
            ) from e
        except asyncio.TimeoutError as e:
            track_api_request(failed=True)
            raise TransportError(f"Request timed out for {path}", endpoint=path) from e

        track_api_request()
        logger.debug(f"GET {path} -> {len(body)} bytes")
        return body

    async def get_json(self, path: str) -> Any:
        """
        Perform one GET request and decode the body as JSON.

        Raises:
            TransportError: See get_bytes.
            APIError: If the body is not valid JSON.
        """
        body = await self.get_bytes(path)
        try:
            return json.loads(body)
        except ValueError as e:
            raise APIError(
                f"Invalid JSON in response from {path}", endpoint=path, details=str(e)
            ) from e


@asynccontextmanager
async def create_async_client(settings: Settings) -> AsyncIterator[AsyncVercelClient]:
    """
    Provide a configured AsyncVercelClient and ensure it is closed after use.
    """
    client = AsyncVercelClient(settings)
    try:
        yield client
    finally:
        await client.close()
