"""Exception hierarchy for the HPS proxy package."""

from __future__ import annotations


class HPSError(Exception):
    """Base exception for all HPS proxy errors."""


class ProtocolError(HPSError):
    """Wire data does not follow the HTTP Proxy Service layout."""


class InvalidResponseError(ProtocolError):
    """A characteristic value read from a peripheral is malformed."""


class TransportError(HPSError):
    """The outbound HTTP request could not be completed."""


class BLEConnectionError(HPSError):
    """BLE connection could not be established or was lost."""


class BLETimeoutError(HPSError):
    """A BLE operation did not complete in time."""


class PeripheralError(HPSError):
    """Registering the GATT application or advertisement with BlueZ failed."""
