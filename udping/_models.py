from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from rich.markup import escape

from ._protocol import Address, format_address


class PingResult(Enum):
    SUCCESS = "Success"
    SEND_FAILED = "SendFailed"
    INVALID = "Invalid"
    TIMEOUT = "Timeout"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        """Outcomes that abort a probe sequence."""
        return self in (PingResult.SEND_FAILED, PingResult.INVALID)


@dataclass
class PingAttempt:
    target: Address
    result: PingResult
    elapsed_ms: float
    sequence: int = 0

    def __str__(self) -> str:
        return f"{format_address(self.target)} {self.result} {int(self.elapsed_ms)}ms"

    def __rich__(self) -> str:
        style = "green" if self.result is PingResult.SUCCESS else "yellow"
        if self.result.is_terminal:
            style = "red"
        return (
            f"{escape(format_address(self.target))} [{style}]{self.result}[/{style}] "
            f"{int(self.elapsed_ms)}ms"
        )


@dataclass
class SequenceStats:
    sent: int = 0
    success: int = 0
    timeouts: int = 0
    rtt_min: Optional[float] = None
    rtt_avg: Optional[float] = None
    rtt_max: Optional[float] = None

    @classmethod
    def from_attempts(cls, attempts: list[PingAttempt]) -> "SequenceStats":
        rtts = [a.elapsed_ms for a in attempts if a.result is PingResult.SUCCESS]
        return cls(
            sent=len(attempts),
            success=len(rtts),
            timeouts=len([a for a in attempts if a.result is PingResult.TIMEOUT]),
            rtt_min=min(rtts) if rtts else None,
            rtt_avg=(sum(rtts) / len(rtts)) if rtts else None,
            rtt_max=max(rtts) if rtts else None,
        )

    @property
    def loss_percent(self) -> float:
        return ((self.sent - self.success) / self.sent) * 100 if self.sent else 0.0


@dataclass
class SequenceResult:
    target: Address
    attempts: list[PingAttempt] = field(default_factory=list)
    stats: SequenceStats = field(default_factory=SequenceStats)
    aborted: Optional[PingResult] = None

    @property
    def completed(self) -> bool:
        return self.aborted is None

    def __str__(self) -> str:
        addr = format_address(self.target)
        if self.aborted is not None:
            return f"{addr} aborted: {self.aborted}"
        avg = f"{self.stats.rtt_avg:.0f}" if self.stats.rtt_avg is not None else "n/a"
        return (
            f"{addr} done, rtt avg: {avg} ms, "
            f"success: {self.stats.success}, timeout: {self.stats.timeouts}"
        )

    def __rich__(self) -> str:  # pragma: no cover - rich display helper
        return escape(self.__str__())
