"""Background reader that routes replies to waiting probes."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

from ._console import logger
from ._endpoint import Endpoint
from ._protocol import is_valid_reply
from ._requests import RequestTable

POLL_INTERVAL = 1.0


class Dispatcher:
    """Reads the shared socket and resolves entries of a :class:`RequestTable`.

    The loop waits for a datagram at most ``poll_interval`` seconds at a time.
    Every datagram resolves the pending probe of its source address: ``True``
    when the payload carries the magic header, ``False`` otherwise. When a
    poll elapses without traffic the loop stops if :meth:`stop` was called,
    or, with ``idle_shutdown``, if no probe is pending. A socket error stops
    the loop for good and is kept in :attr:`error`.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        requests: RequestTable,
        *,
        poll_interval: float = POLL_INTERVAL,
        idle_shutdown: bool = True,
    ) -> None:
        self.endpoint = endpoint
        self.requests = requests
        self.poll_interval = poll_interval
        self.idle_shutdown = idle_shutdown
        self.error: Optional[OSError] = None
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def failed(self) -> bool:
        return self.error is not None

    def start(self) -> None:
        if self._running or self.failed:
            return
        self._stop.clear()
        self._running = True
        self._task = asyncio.get_running_loop().create_task(
            self.run(), name="udping-dispatcher"
        )

    def stop(self) -> None:
        """Ask the loop to finish at its next poll timeout."""
        self._stop.set()

    async def wait_closed(self) -> None:
        if self._task is not None:
            await self._task

    async def close(self) -> None:
        self.stop()
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._running = False

    async def run(self) -> None:
        self._running = True
        logger.debug("Dispatcher started")
        try:
            while True:
                try:
                    received = await self.endpoint.receive(self.poll_interval)
                except OSError as exc:
                    self.error = exc
                    logger.error("Local socket invalid, dispatcher stopped: %s", exc)
                    return

                if received is not None:
                    data, peer = received
                    matched = is_valid_reply(data)
                    delivered = self.requests.notify(peer, matched)
                    logger.debug(
                        "Datagram from %s:%d (%d bytes, valid=%s, delivered=%s)",
                        peer[0],
                        peer[1],
                        len(data),
                        matched,
                        delivered,
                    )
                    continue

                if self._stop.is_set():
                    logger.debug("Dispatcher stopped on request")
                    return
                if self.idle_shutdown and self.requests.is_empty():
                    logger.debug("Dispatcher idle, stopping")
                    return
        finally:
            self._running = False
