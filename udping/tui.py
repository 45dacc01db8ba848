"""Interactive Textual monitor for udping."""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from textual import on, work
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Input, Label, Static

from ._client import DEFAULT_TIMEOUT, AsyncClient
from ._driver import DEFAULT_COUNT, run_sequences
from ._exceptions import AddressParseError
from ._models import PingAttempt, PingResult, SequenceResult, SequenceStats
from ._protocol import Address, address_family, format_address, parse_address

COLUMNS = (
    ("Target", "target"),
    ("Sent", "sent"),
    ("Success", "success"),
    ("Timeout", "timeout"),
    ("Loss%", "loss"),
    ("Last (ms)", "last"),
    ("Avg (ms)", "avg"),
    ("Status", "status"),
)


def _format_ms(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else "-"


def parse_targets(text: str) -> list[Address]:
    """Split a comma or space separated list of ``ip:port`` targets."""
    targets: list[Address] = []
    for chunk in text.replace(",", " ").split():
        addr = parse_address(chunk)
        if addr not in targets:
            targets.append(addr)
    return targets


class ProbeTable(DataTable):
    """Live per-target counters."""

    def on_mount(self) -> None:
        for label, key in COLUMNS:
            self.add_column(label, key=key)

    def reset(self, targets: Sequence[Address]) -> None:
        self.clear()
        for addr in targets:
            key = format_address(addr)
            self.add_row(key, "0", "0", "0", "-", "-", "-", "running", key=key)

    def record(self, attempt: PingAttempt, attempts: list[PingAttempt]) -> None:
        key = format_address(attempt.target)
        stats = SequenceStats.from_attempts(attempts)
        last = attempt.elapsed_ms if attempt.result is PingResult.SUCCESS else None
        self.update_cell(key, "sent", str(stats.sent))
        self.update_cell(key, "success", str(stats.success))
        self.update_cell(key, "timeout", str(stats.timeouts))
        self.update_cell(key, "loss", f"{stats.loss_percent:.1f}")
        self.update_cell(key, "last", _format_ms(last))
        self.update_cell(key, "avg", _format_ms(stats.rtt_avg))
        self.update_cell(key, "status", str(attempt.result))

    def finish(self, result: SequenceResult) -> None:
        key = format_address(result.target)
        status = "done" if result.completed else f"aborted ({result.aborted})"
        self.update_cell(key, "status", status)


class UdpingApp(App):
    """Run probe sequences against several targets and watch them live."""

    CSS = """
    #form { height: auto; padding: 0 1; }
    #options { height: auto; }
    #options Vertical { width: 1fr; height: auto; }
    #summary { padding: 0 1; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "run_probes", "Run"),
    ]

    def __init__(
        self,
        targets: Sequence[Address] = (),
        *,
        count: int = DEFAULT_COUNT,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__()
        self.initial_targets = list(targets)
        self.count = count
        self.timeout = timeout
        self._attempts: dict[Address, list[PingAttempt]] = {}

    def compose(self) -> ComposeResult:
        with Vertical(id="form"):
            yield Label("Targets (ip:port, comma separated)")
            yield Input(
                placeholder="127.0.0.1:9000",
                id="targets",
                value=", ".join(format_address(t) for t in self.initial_targets),
            )
            with Horizontal(id="options"):
                with Vertical():
                    yield Label("Count")
                    yield Input(str(self.count), id="count", compact=True)
                with Vertical():
                    yield Label("Timeout")
                    yield Input(str(self.timeout), id="timeout", compact=True)
            yield Button("Run", id="run", flat=True)
        yield ProbeTable(id="probe-table")
        yield Static(id="summary")
        yield Footer()

    def on_mount(self) -> None:
        if self.initial_targets:
            self.call_after_refresh(self.action_run_probes)

    @on(Button.Pressed, "#run")
    def action_run_probes(self) -> None:
        try:
            targets = parse_targets(self.query_one("#targets", Input).value)
            count = max(1, int(self.query_one("#count", Input).value or DEFAULT_COUNT))
            timeout = float(self.query_one("#timeout", Input).value or DEFAULT_TIMEOUT)
        except (AddressParseError, ValueError) as exc:
            self.bell()
            self.notify(f"Error: {exc}", severity="error")
            return
        if not targets:
            self.notify("Please enter at least one target.")
            return
        self.perform_probes(targets, count, timeout)

    @work(exclusive=True)
    async def perform_probes(
        self, targets: list[Address], count: int, timeout: float
    ) -> None:
        table = self.query_one(ProbeTable)
        summary = self.query_one("#summary", Static)
        table.reset(targets)
        summary.update("Probing...")
        self._attempts = {addr: [] for addr in targets}

        def _record(attempt: PingAttempt) -> None:
            history = self._attempts.setdefault(attempt.target, [])
            history.append(attempt)
            table.record(attempt, history)

        by_family: dict[int, list[Address]] = {}
        for addr in targets:
            by_family.setdefault(address_family(addr), []).append(addr)

        async def _family_run(family: int, group: list[Address]) -> list[SequenceResult]:
            async with AsyncClient(timeout=timeout, family=family) as client:
                return await run_sequences(
                    client, group, count=count, on_attempt=_record
                )

        groups = await asyncio.gather(
            *(_family_run(family, group) for family, group in by_family.items())
        )
        results = [result for group in groups for result in group]

        for result in results:
            table.finish(result)
        completed = [r for r in results if r.completed]
        summary.update(
            f"Targets: {len(results)} | Completed: {len(completed)} | "
            f"Aborted: {len(results) - len(completed)}"
        )


if __name__ == "__main__":
    UdpingApp().run()
