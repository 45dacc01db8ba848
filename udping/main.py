"""Command line interface for udping."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from ._client import DEFAULT_TIMEOUT, AsyncClient
from ._console import configure_logging, console
from ._driver import DEFAULT_COUNT, run_sequences
from ._echo import EchoPinger
from ._exceptions import AddressParseError, EndpointBindError
from ._models import PingAttempt, SequenceResult
from ._protocol import Address, address_family, parse_address


def _target(value: str) -> Address:
    try:
        return parse_address(value)
    except AddressParseError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="udping",
        description="Probe UDP echo responders with the j-wy magic datagram.",
    )
    parser.add_argument(
        "targets",
        metavar="ip:port",
        nargs="+",
        type=_target,
        help="target address, IPv6 as [addr]:port",
    )
    parser.add_argument(
        "-c",
        "--count",
        type=int,
        default=None,
        help=(
            f"probes per target (default {DEFAULT_COUNT}; "
            "with --continuous, unlimited)"
        ),
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"seconds to wait for each reply (default {DEFAULT_TIMEOUT})",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--continuous",
        action="store_true",
        help="ping until interrupted, one socket per target",
    )
    mode.add_argument("--tui", action="store_true", help="open the live monitor")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _print_attempt(attempt: PingAttempt) -> None:
    console.print(attempt)


async def probe_targets(
    targets: Sequence[Address], *, count: int, timeout: float
) -> list[SequenceResult]:
    """Run a sequence per target, one shared client per address family."""
    by_family: dict[int, list[Address]] = {}
    for target in targets:
        by_family.setdefault(address_family(target), []).append(target)

    async def _family_run(family: int, group: list[Address]) -> list[SequenceResult]:
        async with AsyncClient(timeout=timeout, family=family) as client:
            return await run_sequences(
                client, group, count=count, on_attempt=_print_attempt
            )

    groups = await asyncio.gather(
        *(_family_run(family, group) for family, group in by_family.items())
    )
    results: list[SequenceResult] = []
    for group in groups:
        for result in group:
            console.print(result)
            results.append(result)
    return results


async def ping_continuously(
    targets: Sequence[Address], *, timeout: float, count: Optional[int] = None
) -> None:
    async def _loop(target: Address) -> None:
        async with EchoPinger(target, timeout=timeout) as pinger:
            async for attempt in pinger.run(count):
                _print_attempt(attempt)

    await asyncio.gather(*(_loop(target) for target in targets))


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Parse ``argv`` and run the requested mode; returns the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.count is not None and args.count < 1:
        parser.error("--count must be at least 1")
    count = args.count if args.count is not None else DEFAULT_COUNT

    if args.tui:
        from .tui import UdpingApp

        UdpingApp(targets=args.targets, count=count, timeout=args.timeout).run()
        return 0

    try:
        if args.continuous:
            asyncio.run(
                ping_continuously(
                    args.targets, timeout=args.timeout, count=args.count
                )
            )
        else:
            asyncio.run(
                probe_targets(args.targets, count=count, timeout=args.timeout)
            )
    except EndpointBindError as exc:
        console.print(f"[red]{exc}[/red]")
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(run())
