"""BLE connection management for talking to an HPS peripheral."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import BLEConnectionError, BLETimeoutError
from ..protocol.commands import HTTP_STATUS_CODE_UUID, SERVICE_UUID

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class BLEConnection:
    """BLE link to one HPS peripheral, used by HPSClient.

    Connects through bleak-retry-connector with GATT service caching, checks
    that the peripheral exposes the HTTP Proxy Service, and queues every
    HTTP Status Code notification until the client asks for it.
    """

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            timeout: float = 10.0,
            max_attempts: int = 4,
            use_services_cache: bool = True,
    ):
        """Initialize BLE connection manager.

        Args:
            mac_address: Peripheral MAC address
            ble_device: Optional BLEDevice from a prior scan
            timeout: Scan and connection timeout in seconds (default: 10)
            max_attempts: Connection attempts for bleak-retry-connector (default: 4)
            use_services_cache: Reuse cached GATT services on reconnect (default: True)
        """
        self.mac_address = mac_address
        self.ble_device = ble_device
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache

        self._client: BleakClient | None = None
        self._status_queue: asyncio.Queue[bytes] = asyncio.Queue()

    async def __aenter__(self) -> BLEConnection:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    async def _resolve_device(self) -> BLEDevice:
        """Use the known BLEDevice or scan for the MAC address.

        Raises:
            BLEConnectionError: If the peripheral is not advertising
        """
        if self.ble_device is not None:
            return self.ble_device

        _LOGGER.debug("Scanning for %s (timeout=%.1fs)", self.mac_address, self.timeout)
        device = await BleakScanner.find_device_by_address(self.mac_address, timeout=self.timeout)
        if device is None:
            raise BLEConnectionError(f"Peripheral {self.mac_address} not found during scan")
        self.ble_device = device
        return device

    async def connect(self) -> None:
        """Connect and subscribe to HTTP Status Code notifications.

        Does nothing if already connected.

        Raises:
            BLEConnectionError: If the peripheral cannot be reached or lacks the HPS service
            BLETimeoutError: If the connection times out
        """
        if self.is_connected:
            return

        try:
            device = await self._resolve_device()
            _LOGGER.debug(
                "Connecting to %s (max_attempts=%d)",
                self.mac_address,
                self.max_attempts,
            )
            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=device.name or self.mac_address,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )
            _LOGGER.debug("Connected to %s (mtu=%d)", self.mac_address, self.mtu_size)
            await self._subscribe_status()
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(f"Connection to {self.mac_address} timed out after {self.timeout}s") from e
        except BLEConnectionError:
            raise
        except Exception as e:
            raise BLEConnectionError(f"Failed to connect to {self.mac_address}: {e}") from e

    async def disconnect(self) -> None:
        """Disconnect from peripheral; errors are logged, not raised."""
        client, self._client = self._client, None
        if client is None or not client.is_connected:
            return
        _LOGGER.debug("Disconnecting from %s", self.mac_address)
        try:
            await client.disconnect()
        except BleakError as e:
            _LOGGER.warning("Error during disconnect from %s: %s", self.mac_address, e)

    async def _subscribe_status(self) -> None:
        client = self._require_client()
        if client.services.get_service(SERVICE_UUID) is None:
            raise BLEConnectionError(f"{self.mac_address} does not expose service {SERVICE_UUID}")

        await client.start_notify(HTTP_STATUS_CODE_UUID, self._on_status)
        _LOGGER.debug("Status notifications started")

    def _on_status(self, sender, data: bytearray) -> None:
        self._status_queue.put_nowait(bytes(data))

    def _require_client(self) -> BleakClient:
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")
        return self._client

    async def read(self, uuid: str) -> bytes:
        """Read a characteristic value.

        Raises:
            BLEConnectionError: If not connected or the read fails
        """
        client = self._require_client()
        try:
            return bytes(await client.read_gatt_char(uuid))
        except BleakError as e:
            raise BLEConnectionError(f"Read of {uuid} failed: {e}") from e

    async def write(self, uuid: str, data: bytes) -> None:
        """Write a characteristic value, waiting for the write response.

        Raises:
            BLEConnectionError: If not connected or the write fails
        """
        client = self._require_client()
        try:
            await client.write_gatt_char(uuid, data, response=True)
        except BleakError as e:
            raise BLEConnectionError(f"Write to {uuid} failed: {e}") from e

    def clear_status(self) -> None:
        """Drop status notifications received so far."""
        while not self._status_queue.empty():
            self._status_queue.get_nowait()

    async def read_status(self, timeout: float) -> bytes:
        """Wait for the next HTTP Status Code notification.

        Raises:
            BLETimeoutError: If no notification arrives within timeout
        """
        try:
            return await asyncio.wait_for(
                self._status_queue.get(),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"No status notification received within {timeout}s"
            ) from e

    @property
    def mtu_size(self) -> int:
        """Negotiated ATT MTU of the current connection."""
        return self._client.mtu_size if self._client else 0

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to peripheral."""
        return self._client is not None and self._client.is_connected
