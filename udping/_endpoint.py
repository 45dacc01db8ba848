from __future__ import annotations

import asyncio
import socket
from typing import Optional

from ._console import logger
from ._exceptions import EndpointBindError, EndpointClosedError
from ._protocol import Address, normalize_address

RECV_BUFFER_SIZE = 1024


class Endpoint:
    """Non-blocking UDP socket shared by every sender and a single reader."""

    def __init__(self, family: int = socket.AF_INET) -> None:
        self.family = family
        self._sock: Optional[socket.socket] = None
        self._closed = False

    @property
    def sock(self) -> socket.socket:
        if self._closed:
            raise EndpointClosedError("udp socket is closed")
        if self._sock is None:
            host = "::" if self.family == socket.AF_INET6 else "0.0.0.0"
            try:
                sock = socket.socket(self.family, socket.SOCK_DGRAM)
            except OSError as exc:
                raise EndpointBindError(f"Create udp socket failed! {exc}") from exc
            try:
                sock.setblocking(False)
                sock.bind((host, 0))
            except OSError as exc:
                sock.close()
                raise EndpointBindError(f"Bind udp socket failed! {exc}") from exc
            self._sock = sock
            logger.debug("Bound udp socket on %s", self.local_address)
        return self._sock

    @property
    def local_address(self) -> Address:
        return normalize_address(self.sock.getsockname())

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, data: bytes, destination: Address) -> int:
        loop = asyncio.get_running_loop()
        return await loop.sock_sendto(self.sock, data, destination)

    async def receive(
        self, timeout: float, bufsize: int = RECV_BUFFER_SIZE
    ) -> Optional[tuple[bytes, Address]]:
        """Wait up to ``timeout`` seconds for one datagram.

        Returns ``None`` when the deadline elapses. I/O errors propagate as
        :class:`OSError`.
        """
        loop = asyncio.get_running_loop()
        try:
            data, addr = await asyncio.wait_for(
                loop.sock_recvfrom(self.sock, bufsize), timeout
            )
        except asyncio.TimeoutError:
            return None
        return data, normalize_address(addr)

    def close(self) -> None:
        self._closed = True
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def __enter__(self) -> "Endpoint":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
