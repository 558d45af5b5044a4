"""Test the BlueZ object tree without a system bus."""

from __future__ import annotations

import asyncio

import pytest
from dbus_next import Variant
from dbus_next.errors import DBusError

from hpsproxy.models.config import ServerConfig
from hpsproxy.protocol.commands import (
    HTTP_CONTROL_POINT_UUID,
    HTTP_ENTITY_BODY_UUID,
    HTTP_STATUS_CODE_UUID,
    HTTP_URI_UUID,
    SERVICE_UUID,
)
from hpsproxy.server.bluez import SERVICE_PATH, BluezPeripheral
from hpsproxy.server.service import HttpProxyService


def _peripheral(transport, mtu: int = 0) -> BluezPeripheral:
    config = ServerConfig(mtu=mtu)
    return BluezPeripheral(HttpProxyService(config, transport), config)


def _characteristic(peripheral: BluezPeripheral, uuid: str):
    return next(c for c in peripheral.characteristics if c.managed_properties()["UUID"].value == uuid)


class TestObjectTree:
    """Test exported GATT objects."""

    def test_eight_characteristics(self, transport):
        """Test every HPS characteristic is exported under the service."""
        peripheral = _peripheral(transport)
        objects = peripheral.application.managed_objects()

        assert len(peripheral.characteristics) == 8
        assert objects[SERVICE_PATH]["org.bluez.GattService1"]["UUID"].value == SERVICE_UUID
        for characteristic in peripheral.characteristics:
            assert characteristic.path.startswith(f"{SERVICE_PATH}/char")
            assert characteristic.path in objects

    def test_status_flags(self, transport):
        """Test only the status code characteristic notifies."""
        peripheral = _peripheral(transport)
        status = _characteristic(peripheral, HTTP_STATUS_CODE_UUID).managed_properties()

        assert status["Flags"].value == ["read", "notify"]
        assert status["Notifying"].value is False

    def test_adapter_path(self, transport):
        """Test the adapter path follows the configured adapter."""
        assert _peripheral(transport).adapter_path == "/org/bluez/hci0"


class TestReadWrite:
    """Test ReadValue/WriteValue handling."""

    def test_uri_write_and_read(self, transport):
        """Test writes reach the service and reads return them."""
        peripheral = _peripheral(transport)
        uri = _characteristic(peripheral, HTTP_URI_UUID)

        uri.write_value(b"example.com/api", {})

        assert peripheral.service.read_uri() == b"example.com/api"
        assert uri.read_value({}) == b"example.com/api"
        assert uri.read_value({"offset": Variant("q", 8)}) == b"com/api"

    def test_long_write_with_offset(self, transport):
        """Test a write at an offset extends the stored value."""
        peripheral = _peripheral(transport)
        uri = _characteristic(peripheral, HTTP_URI_UUID)

        uri.write_value(b"example.com/", {})
        uri.write_value(b"api", {"offset": Variant("q", 12)})

        assert peripheral.service.read_uri() == b"example.com/api"

    def test_body_read_uses_mtu_option(self, transport):
        """Test paged reads use the MTU reported by BlueZ."""
        peripheral = _peripheral(transport)
        body = _characteristic(peripheral, HTTP_ENTITY_BODY_UUID)
        peripheral.service.write_body(bytes(100))

        assert len(body.read_value({"mtu": Variant("q", 23)})) == 20
        assert len(body.read_value({"mtu": Variant("q", 185)})) == 100

    def test_control_point_not_readable(self, transport):
        """Test reading a write-only characteristic fails."""
        control = _characteristic(_peripheral(transport), HTTP_CONTROL_POINT_UUID)
        with pytest.raises(DBusError):
            control.read_value({})


class TestControlPoint:
    """Test background dispatch of control point writes."""

    @pytest.mark.asyncio
    async def test_write_dispatches_in_background(self, transport):
        """Test the write returns at once and the request completes later."""
        peripheral = _peripheral(transport)
        _characteristic(peripheral, HTTP_URI_UUID).write_value(b"example.com/api", {})
        control = _characteristic(peripheral, HTTP_CONTROL_POINT_UUID)

        control.write_value(b"\x01", {"mtu": Variant("q", 185)})
        assert peripheral.service.read_status_code() == b""

        await asyncio.gather(*peripheral._tasks)

        assert peripheral.service.read_status_code() == bytes.fromhex("c80005")
        assert transport.requests[0].url == "http://example.com/api"

    @pytest.mark.asyncio
    async def test_notify_subscription(self, transport):
        """Test StartNotify and StopNotify manage the status subscription."""
        peripheral = _peripheral(transport)
        status = _characteristic(peripheral, HTTP_STATUS_CODE_UUID)

        status.StartNotify()
        assert peripheral.service.notifier.subscriber_count == 1
        assert status.managed_properties()["Notifying"].value is True

        status.StopNotify()
        assert peripheral.service.notifier.subscriber_count == 0
