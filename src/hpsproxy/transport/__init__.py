"""BLE and HTTP transports."""

from .connection import BLEConnection
from .http import AiohttpTransport, HttpTransport

__all__ = [
    "AiohttpTransport",
    "BLEConnection",
    "HttpTransport",
]
