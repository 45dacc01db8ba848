"""Single-target pinger with its own socket and no dispatcher."""

from __future__ import annotations

import asyncio
import time
from typing import AsyncIterator, Optional

from ._client import DEFAULT_TIMEOUT
from ._console import logger
from ._endpoint import Endpoint
from ._models import PingAttempt, PingResult
from ._protocol import (
    MAGIC_HEADER,
    TargetLike,
    address_family,
    format_address,
    is_valid_reply,
    parse_address,
)

OK_MIN_INTERVAL = 0.02
ERR_MIN_INTERVAL = 1.0


class EchoPinger:
    """Ping one target in a loop, reading replies straight off its socket.

    Datagrams from any other peer are ignored. The loop keeps a minimum
    cadence between probe starts: :data:`OK_MIN_INTERVAL` after a success,
    :data:`ERR_MIN_INTERVAL` after anything else.
    """

    def __init__(
        self,
        target: TargetLike,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        ok_interval: float = OK_MIN_INTERVAL,
        err_interval: float = ERR_MIN_INTERVAL,
    ) -> None:
        self.target = parse_address(target)
        self.timeout = timeout
        self.ok_interval = ok_interval
        self.err_interval = err_interval
        self.endpoint = Endpoint(address_family(self.target))
        self._sequence = 0

    def close(self) -> None:
        self.endpoint.close()

    async def __aenter__(self) -> "EchoPinger":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def ping(self) -> PingResult:
        try:
            sent = await self.endpoint.send(MAGIC_HEADER, self.target)
        except OSError as exc:
            logger.warning("Send to %s failed: %s", format_address(self.target), exc)
            return PingResult.SEND_FAILED
        if sent != len(MAGIC_HEADER):
            return PingResult.SEND_FAILED

        deadline = time.monotonic() + self.timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return PingResult.TIMEOUT
            try:
                received = await self.endpoint.receive(remaining)
            except OSError as exc:
                logger.warning("Receive failed: %s", exc)
                return PingResult.INVALID
            if received is None:
                return PingResult.TIMEOUT

            data, peer = received
            if peer != self.target:
                logger.debug("Ignoring datagram from %s", format_address(peer))
                continue
            if is_valid_reply(data):
                return PingResult.SUCCESS
            return PingResult.INVALID

    async def attempt(self) -> PingAttempt:
        self._sequence += 1
        begin = time.perf_counter()
        result = await self.ping()
        elapsed_ms = (time.perf_counter() - begin) * 1000
        return PingAttempt(
            target=self.target,
            result=result,
            elapsed_ms=elapsed_ms,
            sequence=self._sequence,
        )

    async def run(self, count: Optional[int] = None) -> AsyncIterator[PingAttempt]:
        """Yield attempts forever, or ``count`` of them."""
        done = 0
        while count is None or done < count:
            attempt = await self.attempt()
            done += 1
            yield attempt

            if count is not None and done >= count:
                break
            waiting = (
                self.ok_interval
                if attempt.result is PingResult.SUCCESS
                else self.err_interval
            )
            remaining = waiting - attempt.elapsed_ms / 1000
            if remaining > 0:
                await asyncio.sleep(remaining)
