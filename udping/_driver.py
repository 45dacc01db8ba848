"""Probe sequences and their statistics."""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable, Optional

from ._client import AsyncClient
from ._console import logger
from ._models import PingAttempt, PingResult, SequenceResult, SequenceStats
from ._protocol import Address, TargetLike, format_address, parse_address

DEFAULT_COUNT = 10

AttemptCallback = Callable[[PingAttempt], None]


async def run_sequence(
    client: AsyncClient,
    target: TargetLike,
    *,
    count: int = DEFAULT_COUNT,
    interval: float = 0.0,
    on_attempt: Optional[AttemptCallback] = None,
) -> SequenceResult:
    """Probe ``target`` ``count`` times in a row using a shared client.

    Timeouts are counted and the sequence goes on. ``SendFailed`` or
    ``Invalid`` ends it at once; the returned result then has ``aborted`` set
    and carries no statistics.
    """
    addr = parse_address(target)
    attempts: list[PingAttempt] = []

    logger.info("Starting sequence to %s (%d probes)", format_address(addr), count)
    for idx in range(count):
        attempt = await client.ping(addr)
        attempts.append(attempt)
        if on_attempt is not None:
            on_attempt(attempt)

        if attempt.result is PingResult.SUCCESS:
            logger.debug(
                "Probe %d: reply from %s in %.2f ms",
                idx + 1,
                format_address(addr),
                attempt.elapsed_ms,
            )
        elif attempt.result is PingResult.TIMEOUT:
            logger.warning("Probe %d: %s timed out", idx + 1, format_address(addr))
        else:
            logger.error(
                "Probe %d: %s %s, aborting", idx + 1, format_address(addr), attempt.result
            )
            return SequenceResult(target=addr, attempts=attempts, aborted=attempt.result)

        if interval > 0 and idx < count - 1:
            await asyncio.sleep(interval)

    stats = SequenceStats.from_attempts(attempts)
    logger.info(
        "Sequence stats %s -> success: %d timeout: %d min/avg/max: %s/%s/%s",
        format_address(addr),
        stats.success,
        stats.timeouts,
        f"{stats.rtt_min:.2f} ms" if stats.rtt_min is not None else "n/a",
        f"{stats.rtt_avg:.2f} ms" if stats.rtt_avg is not None else "n/a",
        f"{stats.rtt_max:.2f} ms" if stats.rtt_max is not None else "n/a",
    )
    return SequenceResult(target=addr, attempts=attempts, stats=stats)


async def run_sequences(
    client: AsyncClient,
    targets: Iterable[TargetLike],
    *,
    count: int = DEFAULT_COUNT,
    interval: float = 0.0,
    on_attempt: Optional[AttemptCallback] = None,
) -> list[SequenceResult]:
    """Run one sequence per distinct target concurrently over ``client``."""
    unique: list[Address] = []
    for target in targets:
        addr = parse_address(target)
        if addr not in unique:
            unique.append(addr)
    return list(
        await asyncio.gather(
            *(
                run_sequence(
                    client, addr, count=count, interval=interval, on_attempt=on_attempt
                )
                for addr in unique
            )
        )
    )
