"""Outbound HTTP transport."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from ..exceptions import TransportError
from ..models.http import HttpRequest, HttpResponse

_LOGGER = logging.getLogger(__name__)


class HttpTransport(Protocol):
    """Sends one request and returns the complete response."""

    async def send(self, request: HttpRequest, timeout: float) -> HttpResponse:
        """Send ``request`` and read the whole response.

        Raises:
            TransportError: If the request could not be completed
        """
        ...


class AiohttpTransport:
    """HttpTransport backed by one shared aiohttp.ClientSession.

    The session is created on first use and lives until close().
    Non-2xx responses are returned like any other response.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None):
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> AiohttpTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def send(self, request: HttpRequest, timeout: float) -> HttpResponse:
        session = self._get_session()
        _LOGGER.debug("Sending %s %s", request.method.value, request.url)

        try:
            async with session.request(
                request.method.value,
                request.url,
                headers=request.headers or None,
                data=request.body,
                timeout=aiohttp.ClientTimeout(total=timeout),
                allow_redirects=True,
            ) as response:
                body = await response.read()
                headers = list(response.headers.items())
                status = response.status
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"{request.method.value} {request.url} timed out after {timeout}s"
            ) from e
        except (aiohttp.ClientError, ValueError) as e:
            raise TransportError(
                f"{request.method.value} {request.url} failed: {e}"
            ) from e

        _LOGGER.debug(
            "Response %d with %d header(s) and %d body bytes",
            status,
            len(headers),
            len(body),
        )
        return HttpResponse(status=status, headers=headers, body=body)

    async def close(self) -> None:
        """Close the owned client session."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
