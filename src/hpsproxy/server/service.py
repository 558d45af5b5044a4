"""Characteristic-level handlers of the HTTP Proxy Service."""

from __future__ import annotations

import logging
from collections.abc import Hashable

from ..models.config import ServerConfig
from ..models.result import DispatchOutcome, DispatchResult
from ..models.status import ChunkIndex
from ..protocol.chunking import ChunkCursor, ChunkPager
from ..transport.http import HttpTransport
from .dispatcher import ControlPointDispatcher
from .notifier import Sender, StatusNotifier, Subscription
from .state import SessionState

_LOGGER = logging.getLogger(__name__)


class HttpProxyService:
    """The HPS protocol engine behind the GATT characteristics.

    Each public method serves one read, write or subscribe on one
    characteristic. None of them raise for bad client input: the HPS profile
    has no way to report errors, so failures are only logged.

    Usage:
        service = HttpProxyService(ServerConfig(), AiohttpTransport())
        service.write_uri(b"example.com/api")
        await service.handle_control_point(b"\\x01", negotiated_mtu=185)
        page = service.read_body(negotiated_mtu=185)
    """

    def __init__(
            self,
            config: ServerConfig,
            transport: HttpTransport,
            state: SessionState | None = None,
    ):
        self.config = config
        self.state = state or SessionState()
        self.notifier = StatusNotifier(self.state.status_code)
        self.dispatcher = ControlPointDispatcher(
            self.state,
            self.notifier,
            transport,
            timeout=config.timeout,
        )
        self._headers_pager = ChunkPager(ChunkCursor.HEADERS)
        self._body_pager = ChunkPager(ChunkCursor.BODY)

    # HTTP URI

    def read_uri(self) -> bytes:
        return self.state.uri.read()

    def write_uri(self, value: bytes) -> None:
        self.state.uri.replace(value)

    # HTTP Headers

    def read_headers(self, negotiated_mtu: int | None) -> bytes:
        return self._headers_pager.page(
            self.state.headers.read(),
            self.state.chunk_index.read(),
            self.config.effective_mtu(negotiated_mtu),
        )

    def write_headers(self, value: bytes) -> None:
        self.state.headers.replace(value)

    # HTTP Entity Body

    def read_body(self, negotiated_mtu: int | None) -> bytes:
        return self._body_pager.page(
            self.state.body.read(),
            self.state.chunk_index.read(),
            self.config.effective_mtu(negotiated_mtu),
        )

    def write_body(self, value: bytes) -> None:
        self.state.body.replace(value)

    # HTTP Status Code

    def read_status_code(self) -> bytes:
        return self.state.status_code.read()

    def subscribe_status(self, key: Hashable, send: Sender) -> Subscription:
        """Start delivering status values to ``send``.

        A second subscribe with the same key replaces the first one.
        """
        _LOGGER.info("Status notifications started for %s", key)
        return self.notifier.start_delivery(key, send)

    def unsubscribe_status(self, key: Hashable) -> None:
        _LOGGER.info("Status notifications stopped for %s", key)
        self.notifier.unsubscribe(key)

    # HTTPS Security

    def read_security(self) -> bytes:
        return self.state.security.read()

    # Headers/Body Chunk Index and Chunk Sizes

    def read_chunk_index(self) -> bytes:
        return self.state.chunk_index.read()

    def write_chunk_index(self, value: bytes) -> None:
        if len(value) != ChunkIndex.SIZE:
            _LOGGER.debug("Normalizing %d-byte chunk index to 8 bytes", len(value))
        self.state.chunk_index.replace(ChunkIndex.normalize(value))

    def read_chunk_sizes(self) -> bytes:
        return self.state.chunk_sizes.read()

    # HTTP Control Point

    async def handle_control_point(
            self,
            value: bytes,
            negotiated_mtu: int | None,
    ) -> DispatchResult:
        """Run one control point write to completion and log its outcome.

        Never raises; the write is always accepted.
        """
        mtu = self.config.effective_mtu(negotiated_mtu)
        try:
            result = await self.dispatcher.dispatch(value, mtu)
        except Exception as e:
            _LOGGER.exception("Control point dispatch failed unexpectedly")
            result = DispatchResult.rejected(f"internal error: {e}")

        if result.outcome is DispatchOutcome.OK:
            if result.status is None:
                _LOGGER.debug("Control point: %s", result.reason)
            else:
                _LOGGER.info(
                    "Request completed with status %d (flags 0x%02x, mtu %d)",
                    result.status.status_code,
                    int(result.status.data_status),
                    mtu,
                )
        elif result.outcome is DispatchOutcome.REJECTED:
            _LOGGER.warning("Control point write rejected: %s", result.reason)
        else:
            _LOGGER.error("Request failed: %s", result.reason)

        return result

    async def close(self) -> None:
        """Stop all notification sessions."""
        self.notifier.close()
