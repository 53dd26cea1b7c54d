"""Aggregated run results for howfast."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from howfast._internal.clock import Timespec

__all__ = [
    "RecordReport",
    "RunReport",
    "RunSummary",
]


@dataclass(frozen=True)
class RecordReport:
    """Per-worker view derived from a completed WorkerRecord.

    Attributes:
        ordinal: Worker index.
        elapsed: Wall time between the worker's start and end timestamps.
        status_code: HTTP response code, 0 if no response arrived.
        total_time_us: Request time reported by the executor.
        os_error_code: OS ``errno`` associated with a failure, else 0.
        error_code: Transport error code, 0 on success.
        error_message: One-line error description, empty on success.
    """

    ordinal: int
    elapsed: Timespec
    status_code: int
    total_time_us: int
    os_error_code: int
    error_code: int
    error_message: str

    @property
    def is_error(self) -> bool:
        return self.error_code != 0


@dataclass(frozen=True)
class RunSummary:
    """Whole-run totals.

    Attributes:
        error_count: Number of workers whose request failed.
        total_runs: Number of workers requested.
        elapsed: Wall time from before the first worker was created to
            after the last worker was joined.
    """

    error_count: int
    total_runs: int
    elapsed: Timespec


@dataclass(frozen=True)
class RunReport:
    """Everything a run produces, ready for printing.

    Attributes:
        summary: Whole-run totals.
        records: One report per worker, in ordinal order.
        lines: Telemetry lines to emit, already filtered for silent mode.
    """

    summary: RunSummary
    records: tuple[RecordReport, ...] = field(default_factory=tuple)
    lines: tuple[str, ...] = field(default_factory=tuple)
