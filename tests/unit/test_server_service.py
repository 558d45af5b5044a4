"""Test characteristic-level handlers of HttpProxyService."""

from __future__ import annotations

import asyncio

import pytest

from hpsproxy.models.config import ServerConfig
from hpsproxy.models.http import HttpResponse
from hpsproxy.models.result import DispatchOutcome
from hpsproxy.protocol.commands import build_chunk_index_command
from hpsproxy.server.service import HttpProxyService


class _ExplodingTransport:
    async def send(self, request, timeout):
        raise RuntimeError("boom")


class TestCharacteristics:
    """Test plain reads and writes."""

    def test_uri_round_trip(self, service):
        """Test URI write replaces the stored value."""
        service.write_uri(b"example.com/a")
        service.write_uri(b"example.com/b")
        assert service.read_uri() == b"example.com/b"

    def test_chunk_index_default(self, service):
        """Test the chunk index starts as 8 zero bytes."""
        assert service.read_chunk_index() == bytes(8)

    @pytest.mark.parametrize(
        ("written", "stored"),
        [
            (b"\x02", b"\x02" + bytes(7)),
            (bytes(range(12)), bytes(range(8))),
        ],
    )
    def test_chunk_index_normalized(self, service, written, stored):
        """Test chunk index writes of the wrong size are padded or cut."""
        service.write_chunk_index(written)
        assert service.read_chunk_index() == stored

    def test_unpublished_values_empty(self, service):
        """Test status, security and sizes are empty before any request."""
        assert service.read_status_code() == b""
        assert service.read_security() == b""
        assert service.read_chunk_sizes() == b""

    def test_headers_and_body_writes_store_request(self, service):
        """Test request headers and body are stored as written."""
        service.write_headers(b"Accept: */*\r\n")
        service.write_body(b"payload")
        assert service.state.headers.read() == b"Accept: */*\r\n"
        assert service.state.body.read() == b"payload"


class TestPagedReads:
    """Test headers and body paging through the service."""

    @pytest.mark.asyncio
    async def test_body_paged_at_mtu_20(self, make_transport):
        """Test a 50-byte body read at index 0, 1, 2 yields 20, 20, 10 bytes."""
        body = bytes(range(50))
        transport = make_transport(HttpResponse(status=200, headers=[], body=body))
        service = HttpProxyService(ServerConfig(mtu=20), transport)
        service.write_uri(b"example.com/api")

        result = await service.handle_control_point(b"\x01", negotiated_mtu=185)
        assert result.is_ok
        assert service.read_chunk_sizes()[4:8] == (50).to_bytes(4, "little")

        pages = []
        for index in range(3):
            service.write_chunk_index(build_chunk_index_command(body=index))
            pages.append(service.read_body(negotiated_mtu=185))

        assert [len(page) for page in pages] == [20, 20, 10]
        assert b"".join(pages) == body

    @pytest.mark.asyncio
    async def test_reads_do_not_advance_index(self, make_transport):
        """Test repeated reads without an index write return the same page."""
        transport = make_transport(HttpResponse(status=200, headers=[], body=bytes(50)))
        service = HttpProxyService(ServerConfig(mtu=20), transport)
        service.write_uri(b"example.com/api")
        await service.handle_control_point(b"\x01", negotiated_mtu=185)

        assert service.read_body(185) == service.read_body(185)
        assert service.read_chunk_index() == bytes(8)

    @pytest.mark.asyncio
    async def test_headers_use_headers_cursor(self, make_transport):
        """Test headers page with the headers cursor."""
        headers = [("X-Long", "v" * 40)]
        transport = make_transport(HttpResponse(status=200, headers=headers, body=b""))
        service = HttpProxyService(ServerConfig(mtu=20), transport)
        service.write_uri(b"example.com/api")
        await service.handle_control_point(b"\x01", negotiated_mtu=185)

        full = service.state.headers.read()
        service.write_chunk_index(build_chunk_index_command(headers=1, body=0))
        assert service.read_headers(185) == full[20:40]
        assert service.read_body(185) == b""

    def test_small_value_ignores_index(self, service):
        """Test values within one MTU are returned whole for any index."""
        service.write_body(b"short")
        service.write_chunk_index(build_chunk_index_command(body=5))
        assert service.read_body(negotiated_mtu=None) == b"short"


class TestControlPoint:
    """Test handle_control_point()."""

    @pytest.mark.asyncio
    async def test_get_uses_effective_mtu(self, service, transport):
        """Test the negotiated MTU less 3 bytes is published in chunk sizes."""
        service.write_uri(b"example.com/api")

        result = await service.handle_control_point(b"\x01", negotiated_mtu=185)

        assert result.status.to_bytes() == bytes.fromhex("c80005")
        assert service.read_status_code() == bytes.fromhex("c80005")
        assert service.read_chunk_sizes()[8:] == (182).to_bytes(4, "little")
        assert transport.timeouts == [60.0]

    @pytest.mark.asyncio
    async def test_invalid_write_accepted(self, service):
        """Test an invalid opcode is logged, never raised."""
        result = await service.handle_control_point(b"\x00", negotiated_mtu=185)
        assert result.outcome is DispatchOutcome.REJECTED

    @pytest.mark.asyncio
    async def test_unexpected_error_contained(self):
        """Test an unexpected failure becomes a rejection."""
        service = HttpProxyService(ServerConfig(), _ExplodingTransport())
        service.write_uri(b"example.com/api")

        result = await service.handle_control_point(b"\x01", negotiated_mtu=185)

        assert result.outcome is DispatchOutcome.REJECTED
        assert "boom" in result.reason
        assert service.read_status_code() == b""

    @pytest.mark.asyncio
    async def test_status_notification(self, service):
        """Test subscribers get the current value then the new status."""
        service.write_uri(b"example.com/api")
        received: list[bytes] = []
        done = asyncio.Event()

        def send(value: bytes) -> None:
            received.append(value)
            if len(received) == 2:
                done.set()

        service.subscribe_status("/char4", send)
        await service.handle_control_point(b"\x01", negotiated_mtu=185)
        await asyncio.wait_for(done.wait(), timeout=1)

        assert received == [b"", bytes.fromhex("c80005")]
        service.unsubscribe_status("/char4")
        assert service.notifier.subscriber_count == 0
        await service.close()
