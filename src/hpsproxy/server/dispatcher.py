"""HTTP Control Point handling: issue the stored request, publish the response."""

from __future__ import annotations

import logging
import struct

from ..exceptions import TransportError
from ..models.command import ControlCommand, decode_control_command
from ..models.enums import Scheme
from ..models.http import HttpRequest, HttpResponse
from ..models.result import DispatchResult
from ..models.status import ChunkIndex, ChunkSizes, StatusCode
from ..protocol.commands import SECURITY_NONE, SECURITY_VERIFIED
from ..protocol.headers import parse_header_block, serialize_headers
from ..transport.http import HttpTransport
from .notifier import StatusNotifier
from .state import SessionState

_LOGGER = logging.getLogger(__name__)


class ControlPointDispatcher:
    """Turns one control point write into one outbound request.

    Dispatches are not serialized against each other: two requests in flight
    race, and whichever completes last leaves its response in the buffers.
    """

    def __init__(
            self,
            state: SessionState,
            notifier: StatusNotifier,
            transport: HttpTransport,
            timeout: float,
    ):
        """Initialize dispatcher.

        Args:
            state: Shared buffers to read the request from and store the response in
            notifier: Broadcast point the new status is published through
            transport: Outbound HTTP client
            timeout: Request timeout in seconds
        """
        self._state = state
        self._notifier = notifier
        self._transport = transport
        self.timeout = timeout

    async def dispatch(self, data: bytes, mtu: int) -> DispatchResult:
        """Handle one control point write.

        Args:
            data: Value written to the control point
            mtu: Effective MTU resolved for the writing connection

        Returns:
            DispatchResult; shared state changes only for OK results with a status
        """
        command = decode_control_command(data)
        if command.is_invalid:
            if command.raw is None:
                return DispatchResult.rejected("no opcode provided")
            return DispatchResult.rejected(f"invalid opcode 0x{command.raw:02x}")
        if command.is_cancel:
            return DispatchResult.ok(reason="cancel requested, nothing in progress to stop")

        try:
            request = self._build_request(command)
        except UnicodeDecodeError as e:
            return DispatchResult.transport_failure(f"stored request is not valid UTF-8: {e}")
        if request is None:
            return DispatchResult.rejected("no URI provided")

        _LOGGER.debug(
            "Dispatching %s %s with %d header(s), body=%s",
            request.method.value,
            request.url,
            len(request.headers),
            "none" if request.body is None else f"{len(request.body)} bytes",
        )

        try:
            response = await self._transport.send(request, self.timeout)
        except TransportError as e:
            return DispatchResult.transport_failure(str(e))

        return self._complete(command, response, mtu)

    def _build_request(self, command: ControlCommand) -> HttpRequest | None:
        """Build the outbound request from the stored URI, headers and body.

        Returns:
            HttpRequest, or None if no URI is stored

        Raises:
            UnicodeDecodeError: If a stored value is not valid UTF-8
        """
        address = self._state.uri.read().decode("utf-8")
        if not address:
            return None

        headers = parse_header_block(self._state.headers.read())

        stored_body = self._state.body.read()
        stored_body.decode("utf-8")
        # Sent with every method, DELETE and GET included, whenever non-empty
        body = stored_body or None

        return HttpRequest(
            method=command.method,
            url=f"{command.scheme.value}://{address}",
            headers=headers,
            body=body,
        )

    def _complete(
            self,
            command: ControlCommand,
            response: HttpResponse,
            mtu: int,
    ) -> DispatchResult:
        """Store the response and publish the new status.

        Every value is encoded before the first buffer is touched, so an
        encoding failure leaves the shared state as it was. The status is
        published last.
        """
        try:
            headers_value = serialize_headers(response.headers)
            status = StatusCode.for_response(
                response.status,
                headers_length=len(headers_value),
                body_length=len(response.body),
                mtu=mtu,
            )
            sizes_value = ChunkSizes(
                headers_length=len(headers_value),
                body_length=len(response.body),
                mtu=mtu,
            ).to_bytes()
            status_value = status.to_bytes()
        except (ValueError, struct.error) as e:
            return DispatchResult.rejected(f"cannot encode response: {e}")

        self._state.headers.replace(headers_value)
        self._state.body.replace(response.body)
        self._state.chunk_sizes.replace(sizes_value)
        self._state.chunk_index.replace(ChunkIndex().to_bytes())
        self._state.security.replace(
            SECURITY_VERIFIED if command.scheme is Scheme.SECURE else SECURITY_NONE
        )
        self._notifier.publish(status_value)

        return DispatchResult.ok(status)
