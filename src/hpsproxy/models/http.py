"""Outbound HTTP request and response models."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import HttpMethod

Header = tuple[str, str]


@dataclass(frozen=True)
class HttpRequest:
    """A request built from the proxy's stored URI, headers and body."""

    method: HttpMethod
    url: str
    headers: list[Header] = field(default_factory=list)
    body: bytes | None = None


@dataclass(frozen=True)
class HttpResponse:
    """A completed HTTP exchange, in received header order."""

    status: int
    headers: list[Header] = field(default_factory=list)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Get the first value of a header (case-insensitive), if present."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None
