"""Client for driving a remote HTTP Proxy Service peripheral."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from .exceptions import InvalidResponseError, ProtocolError
from .models.enums import HttpMethod
from .models.http import Header, HttpResponse
from .protocol import (
    HEADERS_BODY_CHUNK_INDEX_UUID,
    HEADERS_BODY_CHUNK_SIZES_UUID,
    HTTP_CONTROL_POINT_UUID,
    HTTP_ENTITY_BODY_UUID,
    HTTP_HEADERS_UUID,
    HTTP_URI_UUID,
    HTTPS_SECURITY_UUID,
    ChunkAssembler,
    ChunkCursor,
    build_cancel_command,
    build_chunk_index_command,
    build_request_command,
    parse_chunk_sizes,
    parse_header_block,
    parse_status_code,
    serialize_headers,
)
from .protocol.responses import is_status_published
from .transport import BLEConnection

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class HPSClient:
    """BLE central that sends HTTP requests through an HPS peripheral.

    Usage:
        async with HPSClient("AA:BB:CC:DD:EE:FF") as client:
            response = await client.request("GET", "example.com/api")
            print(response.status, response.body)

    One request at a time: the peripheral has a single request/response slot.
    """

    # Peripheral request timeout (60s by default) plus BLE round trips
    TIMEOUT_RESPONSE = 70.0

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            timeout: float = 10.0,
    ):
        """Initialize HPS client.

        Args:
            mac_address: Peripheral MAC address
            ble_device: Optional BLEDevice from a prior scan
            timeout: BLE connection timeout in seconds (default: 10)
        """
        self.mac_address = mac_address
        self._connection = BLEConnection(mac_address, ble_device, timeout)

    async def __aenter__(self) -> HPSClient:
        """Connect and subscribe to status notifications."""
        await self._connection.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from peripheral."""
        await self._connection.disconnect()

    def _ensure_connected(self) -> None:
        if not self._connection.is_connected:
            raise RuntimeError("HPS client not connected")

    async def request(
            self,
            method: HttpMethod | str,
            uri: str,
            headers: Mapping[str, str] | Iterable[Header] | None = None,
            body: bytes = b"",
            secure: bool = False,
            timeout: float | None = None,
    ) -> HttpResponse:
        """Send one HTTP request through the peripheral.

        Args:
            method: HTTP method (GET, HEAD, POST, PUT or DELETE)
            uri: Host and path without scheme, e.g. "example.com/api"
            headers: Request headers (default: none)
            body: Request body, sent with any method when non-empty (default: empty)
            secure: Use https (default: False)
            timeout: Seconds to wait for the status notification
                (default: TIMEOUT_RESPONSE)

        Returns:
            HttpResponse reassembled from the paged headers and body

        Raises:
            RuntimeError: If not connected
            BLETimeoutError: If the peripheral never publishes a status
            InvalidResponseError: If a value read back is malformed
        """
        self._ensure_connected()
        method = HttpMethod(method)
        command = build_request_command(method, secure)

        _LOGGER.debug("Requesting %s %s (secure=%s)", method.value, uri, secure)

        await self._connection.write(HTTP_URI_UUID, uri.encode("utf-8"))
        await self._connection.write(HTTP_HEADERS_UUID, serialize_headers(headers or {}))
        await self._connection.write(HTTP_ENTITY_BODY_UUID, body)

        self._connection.clear_status()
        await self._connection.write(HTTP_CONTROL_POINT_UUID, command)

        # The first notification after subscribing may be an empty snapshot
        wait = self.TIMEOUT_RESPONSE if timeout is None else timeout
        notification = await self._connection.read_status(timeout=wait)
        while not is_status_published(notification):
            notification = await self._connection.read_status(timeout=wait)
        status = parse_status_code(notification)

        sizes = parse_chunk_sizes(await self._connection.read(HEADERS_BODY_CHUNK_SIZES_UUID))
        _LOGGER.debug(
            "Status %d, headers=%d bytes, body=%d bytes, mtu=%d",
            status.status_code,
            sizes.headers_length,
            sizes.body_length,
            sizes.mtu,
        )

        headers_value = await self._read_paged(
            HTTP_HEADERS_UUID, ChunkCursor.HEADERS, sizes.headers_length, sizes.mtu
        )
        body_value = await self._read_paged(
            HTTP_ENTITY_BODY_UUID, ChunkCursor.BODY, sizes.body_length, sizes.mtu
        )

        try:
            response_headers = parse_header_block(headers_value)
        except UnicodeDecodeError as e:
            raise InvalidResponseError(f"Response headers are not valid UTF-8: {e}") from e

        _LOGGER.info("%s %s -> %d", method.value, uri, status.status_code)

        return HttpResponse(
            status=status.status_code,
            headers=response_headers,
            body=body_value,
        )

    async def get(self, uri: str, **kwargs) -> HttpResponse:
        return await self.request(HttpMethod.GET, uri, **kwargs)

    async def post(self, uri: str, body: bytes, **kwargs) -> HttpResponse:
        return await self.request(HttpMethod.POST, uri, body=body, **kwargs)

    async def cancel(self) -> None:
        """Write the cancel opcode to the control point."""
        self._ensure_connected()
        await self._connection.write(HTTP_CONTROL_POINT_UUID, build_cancel_command())

    async def read_security(self) -> bytes:
        """Read the HTTPS Security value of the last request."""
        self._ensure_connected()
        return await self._connection.read(HTTPS_SECURITY_UUID)

    async def _read_paged(
            self,
            uuid: str,
            cursor: ChunkCursor,
            total_length: int,
            mtu: int,
    ) -> bytes:
        """Read a paged value by advancing its chunk index cursor.

        Raises:
            InvalidResponseError: If a page does not have the expected size
        """
        assembler = ChunkAssembler(total_length, mtu)

        for index in range(assembler.total_chunks):
            if assembler.total_chunks > 1:
                chunk_index = (
                    build_chunk_index_command(headers=index)
                    if cursor == ChunkCursor.HEADERS
                    else build_chunk_index_command(body=index)
                )
                await self._connection.write(HEADERS_BODY_CHUNK_INDEX_UUID, chunk_index)

            data = await self._connection.read(uuid)
            try:
                assembler.add_chunk(index, data)
            except ProtocolError as e:
                raise InvalidResponseError(str(e)) from e

        return assembler.get_assembled_data()
