"""
Async JSON-over-HTTP client for the upstream market-data API.

Wraps aiohttp. One GET per call, no retries.
"""

import logging
from typing import Any

import aiohttp

from .errors import HttpError, MalformedResponseError

logger = logging.getLogger(__name__)


class HttpJsonClient:
    """Issues GET requests and decodes JSON bodies."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: float | None = None,
    ):
        self._session = session
        self._owns_session = session is None
        self.timeout = timeout

    async def __aenter__(self) -> "HttpJsonClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            if self.timeout is None:
                self._session = aiohttp.ClientSession()
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def fetch_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET `url` and return the decoded JSON value.

        Raises HttpError on a non-success status (with the response body) and
        MalformedResponseError if the body is not JSON.
        """
        session = self._get_session()
        logger.debug(f"GET {url} params={params}")

        async with session.get(url, params=params) as resp:
            if resp.status < 200 or resp.status >= 300:
                body = await resp.text(errors="replace")
                raise HttpError(url, resp.status, body)
            try:
                return await resp.json(content_type=None)
            except (ValueError, aiohttp.ContentTypeError) as e:
                # ValueError covers JSONDecodeError and UnicodeDecodeError
                raise MalformedResponseError(url, f"Invalid JSON body: {e}") from e

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
