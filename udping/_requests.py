"""Table of in-flight probes keyed by peer address."""

from __future__ import annotations

import asyncio
import threading

from ._console import logger
from ._protocol import Address


class RequestTable:
    """Maps a peer address to the one-shot signal of the probe waiting on it.

    Every operation holds the lock only for the dict mutation, so it is safe to
    call from any task (or thread) and never spans an ``await``.

    At most one probe per address is expected to be in flight. A second
    :meth:`register` for the same address replaces the first entry; the
    replaced signal is never resolved and its owner runs to its own timeout.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests: dict[Address, asyncio.Future[bool]] = {}

    def register(self, addr: Address, signal: asyncio.Future[bool]) -> None:
        with self._lock:
            replaced = self._requests.get(addr)
            self._requests[addr] = signal
        if replaced is not None and replaced is not signal:
            logger.debug("Replaced pending probe for %s:%d", *addr)

    def unregister(self, addr: Address) -> None:
        with self._lock:
            self._requests.pop(addr, None)

    def notify(self, addr: Address, matched: bool) -> bool:
        """Resolve and remove the entry for ``addr``.

        Returns ``True`` when a waiting probe received the outcome. Missing
        entries and signals whose waiter already gave up are ignored.
        """
        with self._lock:
            signal = self._requests.pop(addr, None)
        if signal is None or signal.done():
            return False
        loop = signal.get_loop()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            _resolve(signal, matched)
        else:
            loop.call_soon_threadsafe(_resolve, signal, matched)
        return True

    def is_empty(self) -> bool:
        with self._lock:
            return not self._requests

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)

    def __contains__(self, addr: object) -> bool:
        with self._lock:
            return addr in self._requests


def _resolve(signal: asyncio.Future[bool], matched: bool) -> None:
    if not signal.done():
        signal.set_result(matched)
