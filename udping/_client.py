from __future__ import annotations

import asyncio
import socket
import time
from typing import Optional

from ._console import logger
from ._dispatcher import POLL_INTERVAL, Dispatcher
from ._endpoint import Endpoint
from ._exceptions import ClientClosedError
from ._models import PingAttempt, PingResult
from ._protocol import MAGIC_HEADER, Address, TargetLike, format_address, parse_address
from ._requests import RequestTable

DEFAULT_TIMEOUT = 3.0


class AsyncClient:
    """Probe client sharing one socket and one reply dispatcher.

    Any number of tasks may call :meth:`ping_once` concurrently as long as
    they probe different addresses. Two overlapping probes to the same
    address share a table slot: the later one wins and the earlier one ends
    in ``Timeout``.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        family: int = socket.AF_INET,
        idle_shutdown: bool = True,
        requests: Optional[RequestTable] = None,
    ) -> None:
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.idle_shutdown = idle_shutdown
        self.requests = requests if requests is not None else RequestTable()
        self.endpoint = Endpoint(family)
        self._dispatcher: Optional[Dispatcher] = None
        self._closed = False
        self._sequence = 0

    @property
    def dispatcher(self) -> Optional[Dispatcher]:
        return self._dispatcher

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def local_address(self) -> Address:
        if self._closed:
            raise ClientClosedError("client is closed")
        return self.endpoint.local_address

    async def start(self) -> None:
        if self._closed:
            raise ClientClosedError("client is closed")
        if self._dispatcher is None:
            self._dispatcher = Dispatcher(
                self.endpoint,
                self.requests,
                poll_interval=self.poll_interval,
                idle_shutdown=self.idle_shutdown,
            )
            logger.info("Probing from %s", format_address(self.local_address))
        self._dispatcher.start()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._dispatcher is not None:
                await self._dispatcher.close()
        finally:
            self.endpoint.close()

    async def __aenter__(self) -> "AsyncClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def ping_once(self, target: TargetLike) -> PingResult:
        """Send one probe to ``target`` and classify the outcome.

        Returns within :attr:`timeout` seconds (plus scheduling slack) and
        never raises for network failures.
        """
        if self._closed:
            raise ClientClosedError("client is closed")
        addr = parse_address(target)
        loop = asyncio.get_running_loop()
        signal: asyncio.Future[bool] = loop.create_future()

        self.requests.register(addr, signal)
        try:
            # restart after an idle shutdown; a failed dispatcher stays down
            await self.start()

            try:
                sent = await self.endpoint.send(MAGIC_HEADER, addr)
            except OSError as exc:
                logger.warning("Send to %s failed: %s", format_address(addr), exc)
                return PingResult.SEND_FAILED
            if sent != len(MAGIC_HEADER):
                logger.warning(
                    "Short send to %s: %d of %d bytes",
                    format_address(addr),
                    sent,
                    len(MAGIC_HEADER),
                )
                return PingResult.SEND_FAILED

            try:
                matched = await asyncio.wait_for(signal, self.timeout)
            except asyncio.TimeoutError:
                logger.debug("Probe to %s timed out", format_address(addr))
                return PingResult.TIMEOUT

            if not matched:
                logger.warning("Invalid reply from %s", format_address(addr))
                return PingResult.INVALID
            return PingResult.SUCCESS
        finally:
            self.requests.unregister(addr)

    async def ping(self, target: TargetLike) -> PingAttempt:
        """Like :meth:`ping_once`, but timed and numbered."""
        addr = parse_address(target)
        self._sequence += 1
        sequence = self._sequence
        begin = time.perf_counter()
        result = await self.ping_once(addr)
        elapsed_ms = (time.perf_counter() - begin) * 1000
        return PingAttempt(
            target=addr, result=result, elapsed_ms=elapsed_ms, sequence=sequence
        )
