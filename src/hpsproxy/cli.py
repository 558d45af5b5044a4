"""Command line entry point.

Usage:
    hpsproxy serve --name HPS-Proxy --timeout 60 --mtu 0
    hpsproxy request AA:BB:CC:DD:EE:FF GET example.com/api
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from .client import HPSClient
from .exceptions import HPSError
from .models.config import ServerConfig
from .server import BluezPeripheral, HttpProxyService
from .transport import AiohttpTransport

_LOGGER = logging.getLogger(__name__)


async def serve(config: ServerConfig) -> None:
    """Serve the proxy until SIGINT or SIGTERM."""
    _LOGGER.info("Starting HPS server with %s", config)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)

    async with AiohttpTransport() as transport:
        service = HttpProxyService(config, transport)
        async with BluezPeripheral(service, config):
            _LOGGER.info("Service ready.")
            await stop.wait()
            _LOGGER.info("Received stop signal")


async def request(args: argparse.Namespace) -> int:
    """Send one request through a remote HPS peripheral and print the result."""
    headers = []
    for item in args.header:
        name, sep, value = item.partition(":")
        if not sep:
            raise SystemExit(f"Invalid header {item!r}, expected 'Name: Value'")
        headers.append((name.strip(), value.strip()))

    async with HPSClient(args.address, timeout=args.connect_timeout) as client:
        response = await client.request(
            args.method,
            args.uri,
            headers=headers,
            body=args.data.encode("utf-8"),
            secure=args.secure,
        )

    print(f"HTTP {response.status}")
    for name, value in response.headers:
        print(f"{name}: {value}")
    print()
    sys.stdout.buffer.write(response.body)
    sys.stdout.flush()
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hpsproxy",
        description="Bluetooth HTTP Proxy Service (HPS) peripheral and client.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve_parser = commands.add_parser("serve", help="Run the HPS peripheral on a BlueZ adapter.")
    serve_parser.add_argument(
        "-n", "--name",
        default="HPS-Proxy",
        help="Advertised service name. Default: HPS-Proxy",
    )
    serve_parser.add_argument(
        "-t", "--timeout",
        type=float,
        default=60.0,
        help="HTTP requests timeout in seconds. Default: 60",
    )
    serve_parser.add_argument(
        "-m", "--mtu",
        type=int,
        default=0,
        help="Overrides the MTU size in bytes when smaller than the negotiated one (0 = off).",
    )
    serve_parser.add_argument(
        "--adapter",
        default="hci0",
        help="BlueZ adapter to serve on. Default: hci0",
    )

    request_parser = commands.add_parser("request", help="Send a request through a remote HPS peripheral.")
    request_parser.add_argument("address", help="Peripheral MAC address")
    request_parser.add_argument("method", choices=["GET", "HEAD", "POST", "PUT", "DELETE"])
    request_parser.add_argument("uri", help="Host and path without scheme, e.g. example.com/api")
    request_parser.add_argument("--secure", action="store_true", help="Use https.")
    request_parser.add_argument(
        "-H", "--header",
        action="append",
        default=[],
        help="Request header as 'Name: Value' (repeatable).",
    )
    request_parser.add_argument("-d", "--data", default="", help="Request body.")
    request_parser.add_argument(
        "--connect-timeout",
        type=float,
        default=10.0,
        help="BLE connection timeout in seconds. Default: 10",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.command == "serve":
            config = ServerConfig(
                name=args.name,
                timeout=args.timeout,
                mtu=args.mtu,
                adapter=args.adapter,
            )
            asyncio.run(serve(config))
            return 0
        return asyncio.run(request(args))
    except ValueError as e:
        _LOGGER.error("Invalid configuration: %s", e)
        return 2
    except HPSError as e:
        _LOGGER.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
