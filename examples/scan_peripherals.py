"""Scan for BLE peripherals advertising the HTTP Proxy Service.

Usage:
    uv run python examples/scan_peripherals.py --duration 30
    uv run python examples/scan_peripherals.py --fetch example.com/
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import datetime

from bleak import BleakScanner

from hpsproxy import SERVICE_UUID, HPSClient, HPSError


@dataclass
class SeenPeripheral:
    """Track one advertising HPS peripheral."""

    name: str
    rssi: int | None = None
    packets_seen: int = 0


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


async def scan(duration: float) -> dict[str, SeenPeripheral]:
    """Collect peripherals whose advertisement lists the HPS service UUID."""
    seen: dict[str, SeenPeripheral] = {}
    wanted = SERVICE_UUID.lower()

    def callback(device, advertisement_data) -> None:
        if wanted not in (uuid.lower() for uuid in advertisement_data.service_uuids):
            return

        entry = seen.get(device.address)
        if entry is None:
            entry = seen[device.address] = SeenPeripheral(name=device.name or "Unknown")
            print(
                f"[{_timestamp()}] {entry.name} ({device.address}) "
                f"rssi={advertisement_data.rssi}"
            )
        entry.rssi = advertisement_data.rssi
        entry.packets_seen += 1

    print(f"Scanning for HPS peripherals (service {SERVICE_UUID}) for {duration:.1f}s...")
    scanner = BleakScanner(detection_callback=callback)
    await scanner.start()
    try:
        await asyncio.sleep(duration)
    finally:
        await scanner.stop()

    return seen


async def fetch(address: str, uri: str) -> None:
    """GET ``uri`` through one peripheral and print a short summary."""
    try:
        async with HPSClient(address) as client:
            response = await client.get(uri)
    except HPSError as err:
        print(f"  {address}: request failed: {err}")
        return

    content_type = response.header("Content-Type") or "unknown"
    print(
        f"  {address}: HTTP {response.status}, {len(response.headers)} headers, "
        f"{len(response.body)} body bytes ({content_type})"
    )


async def run(duration: float, uri: str | None) -> None:
    seen = await scan(duration)

    print("\nSummary:")
    print(f"  peripherals_seen={len(seen)}")
    for address, entry in sorted(seen.items()):
        print(f"  {address}: name={entry.name} rssi={entry.rssi} packets_seen={entry.packets_seen}")

    if uri:
        print(f"\nFetching {uri}:")
        for address in sorted(seen):
            await fetch(address, uri)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scan for HTTP Proxy Service peripherals and optionally fetch a URI through each."
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Scan duration in seconds. Default: 10",
    )
    parser.add_argument(
        "--fetch",
        metavar="URI",
        help="Host and path to GET through every peripheral found (e.g. example.com/).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    try:
        asyncio.run(run(duration=args.duration, uri=args.fetch))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
