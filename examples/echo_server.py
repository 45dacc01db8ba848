"""Minimal echo responder for trying udping locally."""

from __future__ import annotations

import argparse
import asyncio

from udping import console, configure_logging
from udping._console import logger


class EchoProtocol(asyncio.DatagramProtocol):
    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        logger.debug("Echo %d bytes to %s:%d", len(data), addr[0], addr[1])
        self.transport.sendto(data, addr)


async def serve(host: str, port: int) -> None:
    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        EchoProtocol, local_addr=(host, port)
    )
    console.print(f"Echoing on {host}:{port}")
    try:
        await asyncio.Event().wait()
    finally:
        transport.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=9000)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else "WARNING")
    try:
        asyncio.run(serve(args.host, args.port))
    except KeyboardInterrupt:
        pass
