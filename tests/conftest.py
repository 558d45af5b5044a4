"""Shared fixtures for the unit tests."""

from __future__ import annotations

import pytest

from hpsproxy.exceptions import TransportError
from hpsproxy.models.config import ServerConfig
from hpsproxy.models.http import HttpRequest, HttpResponse
from hpsproxy.server.service import HttpProxyService


class FakeTransport:
    """HttpTransport that records requests and replays canned results."""

    def __init__(self, *results: HttpResponse | Exception):
        self._results = list(results)
        self.requests: list[HttpRequest] = []
        self.timeouts: list[float] = []

    async def send(self, request: HttpRequest, timeout: float) -> HttpResponse:
        self.requests.append(request)
        self.timeouts.append(timeout)
        if not self._results:
            raise TransportError("No fake responses left")
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def small_response() -> HttpResponse:
    """A 200 response whose headers and body both fit a default-MTU read."""
    return HttpResponse(
        status=200,
        headers=[("Content-Type", "text/plain")],
        body=b"hello",
    )


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig()


@pytest.fixture
def transport(small_response) -> FakeTransport:
    return FakeTransport(small_response)


@pytest.fixture
def service(config, transport) -> HttpProxyService:
    return HttpProxyService(config, transport)


@pytest.fixture
def make_transport():
    """Build a FakeTransport replaying the given responses or exceptions."""
    return FakeTransport
