"""
BlueZ GATT peripheral for the HTTP Proxy Service.

Exports the HPS GATT application and an LE advertisement on the system
D-Bus and registers both with BlueZ. Characteristic reads and writes are
forwarded to HttpProxyService; control point writes are accepted at once
and dispatched in the background.

Object tree:
- /org/hpsproxy                    ObjectManager for the application
- /org/hpsproxy/service0           org.bluez.GattService1 (0x1823)
- /org/hpsproxy/service0/charN     org.bluez.GattCharacteristic1
- /org/hpsproxy/advertisement0     org.bluez.LEAdvertisement1
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from dbus_next import Variant
from dbus_next.aio import MessageBus
from dbus_next.constants import BusType, PropertyAccess
from dbus_next.errors import DBusError
from dbus_next.service import ServiceInterface, dbus_property, method

from ..exceptions import PeripheralError
from ..models.config import ServerConfig
from ..protocol.commands import (
    HEADERS_BODY_CHUNK_INDEX_UUID,
    HEADERS_BODY_CHUNK_SIZES_UUID,
    HTTP_CONTROL_POINT_UUID,
    HTTP_ENTITY_BODY_UUID,
    HTTP_HEADERS_UUID,
    HTTP_STATUS_CODE_UUID,
    HTTP_URI_UUID,
    HTTPS_SECURITY_UUID,
    SERVICE_UUID,
)
from .service import HttpProxyService

_LOGGER = logging.getLogger(__name__)

# DBus constants
BLUEZ_SERVICE_NAME = "org.bluez"
ADAPTER_INTERFACE = "org.bluez.Adapter1"
GATT_MANAGER_INTERFACE = "org.bluez.GattManager1"
GATT_SERVICE_INTERFACE = "org.bluez.GattService1"
GATT_CHARACTERISTIC_INTERFACE = "org.bluez.GattCharacteristic1"
LE_ADVERTISING_MANAGER_INTERFACE = "org.bluez.LEAdvertisingManager1"
LE_ADVERTISEMENT_INTERFACE = "org.bluez.LEAdvertisement1"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"
OBJECT_MANAGER_INTERFACE = "org.freedesktop.DBus.ObjectManager"

APPLICATION_PATH = "/org/hpsproxy"
SERVICE_PATH = f"{APPLICATION_PATH}/service0"
ADVERTISEMENT_PATH = f"{APPLICATION_PATH}/advertisement0"

ReadHandler = Callable[[int | None], bytes]
WriteHandler = Callable[[bytes, int | None], None]


def _option(options: dict[str, Variant], name: str) -> Any:
    variant = options.get(name)
    return None if variant is None else variant.value


class GattCharacteristic(ServiceInterface):
    """One org.bluez.GattCharacteristic1 object.

    ``read`` and ``write`` receive the negotiated ATT MTU from the request
    options (None when BlueZ does not report it). ``stored`` returns the
    unpaged value and is used to merge long writes that arrive with an offset.
    """

    def __init__(
            self,
            path: str,
            uuid: str,
            flags: list[str],
            read: ReadHandler | None = None,
            write: WriteHandler | None = None,
            stored: Callable[[], bytes] | None = None,
            notify: HttpProxyService | None = None,
    ) -> None:
        super().__init__(GATT_CHARACTERISTIC_INTERFACE)
        self.path = path
        self._uuid = uuid
        self._flags = flags
        self._read = read
        self._write = write
        self._stored = stored
        self._notify_service = notify
        self._value = b""
        self._notifying = False

    def managed_properties(self) -> dict[str, Variant]:
        properties = {
            "UUID": Variant("s", self._uuid),
            "Service": Variant("o", SERVICE_PATH),
            "Flags": Variant("as", self._flags),
        }
        if self._notify_service is not None:
            properties["Notifying"] = Variant("b", self._notifying)
        return properties

    def read_value(self, options: dict[str, Variant]) -> bytes:
        if self._read is None:
            raise DBusError("org.bluez.Error.NotSupported", "Read not supported")
        value = self._read(_option(options, "mtu"))
        offset = _option(options, "offset") or 0
        _LOGGER.debug("Read %s offset=%d -> %s", self._uuid, offset, value.hex())
        return value[offset:]

    def write_value(self, value: bytes, options: dict[str, Variant]) -> None:
        if self._write is None:
            raise DBusError("org.bluez.Error.NotSupported", "Write not supported")
        value = bytes(value)
        offset = _option(options, "offset") or 0
        if offset and self._stored is not None:
            value = self._stored()[:offset] + value
        _LOGGER.debug("Write %s offset=%d <- %s", self._uuid, offset, value.hex())
        self._write(value, _option(options, "mtu"))

    @method()
    def ReadValue(self, options: "a{sv}") -> "ay":  # noqa: F722
        return self.read_value(options)

    @method()
    def WriteValue(self, value: "ay", options: "a{sv}"):  # noqa: F722
        self.write_value(value, options)

    @method()
    def StartNotify(self):
        if self._notify_service is None:
            raise DBusError("org.bluez.Error.NotSupported", "Notify not supported")
        self._notifying = True
        self._notify_service.subscribe_status(self.path, self._send_notification)

    @method()
    def StopNotify(self):
        if self._notify_service is None:
            raise DBusError("org.bluez.Error.NotSupported", "Notify not supported")
        self._notifying = False
        self._notify_service.unsubscribe_status(self.path)

    def _send_notification(self, value: bytes) -> None:
        self._value = value
        self.emit_properties_changed({"Value": value})

    @dbus_property(access=PropertyAccess.READ)
    def UUID(self) -> "s":  # noqa: F821
        return self._uuid

    @dbus_property(access=PropertyAccess.READ)
    def Service(self) -> "o":  # noqa: F821
        return SERVICE_PATH

    @dbus_property(access=PropertyAccess.READ)
    def Flags(self) -> "as":  # noqa: F722
        return self._flags

    @dbus_property(access=PropertyAccess.READ)
    def Value(self) -> "ay":  # noqa: F821
        return self._value

    @dbus_property(access=PropertyAccess.READ)
    def Notifying(self) -> "b":  # noqa: F821
        return self._notifying


class GattService(ServiceInterface):
    """The primary HTTP Proxy Service object."""

    def __init__(self) -> None:
        super().__init__(GATT_SERVICE_INTERFACE)

    def managed_properties(self) -> dict[str, Variant]:
        return {
            "UUID": Variant("s", SERVICE_UUID),
            "Primary": Variant("b", True),
        }

    @dbus_property(access=PropertyAccess.READ)
    def UUID(self) -> "s":  # noqa: F821
        return SERVICE_UUID

    @dbus_property(access=PropertyAccess.READ)
    def Primary(self) -> "b":  # noqa: F821
        return True


class GattApplication(ServiceInterface):
    """ObjectManager BlueZ queries to discover the GATT hierarchy."""

    def __init__(self, service: GattService, characteristics: list[GattCharacteristic]) -> None:
        super().__init__(OBJECT_MANAGER_INTERFACE)
        self.service = service
        self.characteristics = characteristics

    def managed_objects(self) -> dict[str, dict[str, dict[str, Variant]]]:
        objects = {
            SERVICE_PATH: {GATT_SERVICE_INTERFACE: self.service.managed_properties()},
        }
        for characteristic in self.characteristics:
            objects[characteristic.path] = {
                GATT_CHARACTERISTIC_INTERFACE: characteristic.managed_properties(),
            }
        return objects

    @method()
    def GetManagedObjects(self) -> "a{oa{sa{sv}}}":  # noqa: F722
        return self.managed_objects()


class Advertisement(ServiceInterface):
    """Connectable LE advertisement carrying the HPS service UUID."""

    def __init__(self, local_name: str) -> None:
        super().__init__(LE_ADVERTISEMENT_INTERFACE)
        self._local_name = local_name

    @method()
    def Release(self):
        _LOGGER.info("Advertisement released by BlueZ")

    @dbus_property(access=PropertyAccess.READ)
    def Type(self) -> "s":  # noqa: F821
        return "peripheral"

    @dbus_property(access=PropertyAccess.READ)
    def ServiceUUIDs(self) -> "as":  # noqa: F722
        return [SERVICE_UUID]

    @dbus_property(access=PropertyAccess.READ)
    def LocalName(self) -> "s":  # noqa: F821
        return self._local_name

    @dbus_property(access=PropertyAccess.READ)
    def Discoverable(self) -> "b":  # noqa: F821
        return True


class BluezPeripheral:
    """Serves an HttpProxyService through BlueZ.

    Usage:
        async with BluezPeripheral(service, config):
            await stop_event.wait()
    """

    def __init__(self, service: HttpProxyService, config: ServerConfig) -> None:
        self.service = service
        self.config = config
        self.adapter_path = f"/org/bluez/{config.adapter}"

        self.bus: MessageBus | None = None
        self._adapter_obj = None
        self._tasks: set[asyncio.Task] = set()

        self.gatt_service = GattService()
        self.characteristics = self._build_characteristics()
        self.application = GattApplication(self.gatt_service, self.characteristics)
        self.advertisement = Advertisement(config.name)

    async def __aenter__(self) -> "BluezPeripheral":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    def _build_characteristics(self) -> list[GattCharacteristic]:
        service = self.service
        state = service.state

        def char_path(index: int) -> str:
            return f"{SERVICE_PATH}/char{index}"

        return [
            GattCharacteristic(
                char_path(0),
                HEADERS_BODY_CHUNK_SIZES_UUID,
                ["read"],
                read=lambda mtu: service.read_chunk_sizes(),
            ),
            GattCharacteristic(
                char_path(1),
                HEADERS_BODY_CHUNK_INDEX_UUID,
                ["read", "write", "write-without-response"],
                read=lambda mtu: service.read_chunk_index(),
                write=lambda value, mtu: service.write_chunk_index(value),
                stored=state.chunk_index.read,
            ),
            GattCharacteristic(
                char_path(2),
                HTTP_URI_UUID,
                ["read", "write", "write-without-response"],
                read=lambda mtu: service.read_uri(),
                write=lambda value, mtu: service.write_uri(value),
                stored=state.uri.read,
            ),
            GattCharacteristic(
                char_path(3),
                HTTP_HEADERS_UUID,
                ["read", "write", "write-without-response"],
                read=service.read_headers,
                write=lambda value, mtu: service.write_headers(value),
                stored=state.headers.read,
            ),
            GattCharacteristic(
                char_path(4),
                HTTP_STATUS_CODE_UUID,
                ["read", "notify"],
                read=lambda mtu: service.read_status_code(),
                notify=service,
            ),
            GattCharacteristic(
                char_path(5),
                HTTP_ENTITY_BODY_UUID,
                ["read", "write", "write-without-response"],
                read=service.read_body,
                write=lambda value, mtu: service.write_body(value),
                stored=state.body.read,
            ),
            GattCharacteristic(
                char_path(6),
                HTTPS_SECURITY_UUID,
                ["read"],
                read=lambda mtu: service.read_security(),
            ),
            GattCharacteristic(
                char_path(7),
                HTTP_CONTROL_POINT_UUID,
                ["write", "write-without-response"],
                write=self._on_control_point,
            ),
        ]

    def _on_control_point(self, value: bytes, mtu: int | None) -> None:
        task = asyncio.get_running_loop().create_task(
            self.service.handle_control_point(value, mtu)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def start(self) -> None:
        """Export the objects and register them with BlueZ.

        Raises:
            PeripheralError: If the adapter is missing or BlueZ refuses registration
        """
        try:
            self.bus = await MessageBus(bus_type=BusType.SYSTEM).connect()

            self.bus.export(APPLICATION_PATH, self.application)
            self.bus.export(SERVICE_PATH, self.gatt_service)
            for characteristic in self.characteristics:
                self.bus.export(characteristic.path, characteristic)
            self.bus.export(ADVERTISEMENT_PATH, self.advertisement)

            introspection = await self.bus.introspect(BLUEZ_SERVICE_NAME, self.adapter_path)
            self._adapter_obj = self.bus.get_proxy_object(
                BLUEZ_SERVICE_NAME, self.adapter_path, introspection
            )

            props_iface = self._adapter_obj.get_interface(PROPERTIES_INTERFACE)
            await props_iface.call_set(ADAPTER_INTERFACE, "Powered", Variant("b", True))
            address = (await props_iface.call_get(ADAPTER_INTERFACE, "Address")).value
            _LOGGER.info("Using Bluetooth adapter %s with address %s", self.config.adapter, address)

            gatt_manager = self._adapter_obj.get_interface(GATT_MANAGER_INTERFACE)
            await gatt_manager.call_register_application(APPLICATION_PATH, {})
            _LOGGER.info("GATT application is now being served")

            ad_manager = self._adapter_obj.get_interface(LE_ADVERTISING_MANAGER_INTERFACE)
            await ad_manager.call_register_advertisement(ADVERTISEMENT_PATH, {})
            _LOGGER.info("Started advertising as %r", self.config.name)
        except DBusError as e:
            await self._disconnect_bus()
            raise PeripheralError(f"BlueZ registration failed: {e.text}") from e
        except (OSError, ValueError) as e:
            await self._disconnect_bus()
            raise PeripheralError(f"Cannot reach the system bus: {e}") from e

    async def stop(self) -> None:
        """Unregister from BlueZ and drop the bus connection."""
        _LOGGER.info("Removing service and advertisement")
        for task in list(self._tasks):
            task.cancel()
        await self.service.close()

        if self._adapter_obj is not None:
            try:
                ad_manager = self._adapter_obj.get_interface(LE_ADVERTISING_MANAGER_INTERFACE)
                await ad_manager.call_unregister_advertisement(ADVERTISEMENT_PATH)
                gatt_manager = self._adapter_obj.get_interface(GATT_MANAGER_INTERFACE)
                await gatt_manager.call_unregister_application(APPLICATION_PATH)
            except DBusError as e:
                _LOGGER.warning("Error during unregister: %s", e.text)
            finally:
                self._adapter_obj = None

        await self._disconnect_bus()

    async def _disconnect_bus(self) -> None:
        if self.bus is not None:
            self.bus.disconnect()
            self.bus = None
