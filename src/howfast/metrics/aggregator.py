"""Turns completed worker records into telemetry lines and a summary.

Aggregation is a pure function of the records: running it twice over the
same collection yields equal reports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from howfast._internal.logging import get_logger
from howfast.metrics.models import RecordReport, RunReport, RunSummary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from howfast._internal.clock import Timespec
    from howfast.engine.worker import WorkerRecord

logger = get_logger("metrics.aggregator")


def report_record(record: WorkerRecord) -> RecordReport:
    """Build the per-worker report for a completed record.

    Raises:
        ValueError: If the record has not completed.
    """
    if record.outcome is None:
        msg = f"worker {record.ordinal} has no outcome"
        raise ValueError(msg)

    outcome = record.outcome
    return RecordReport(
        ordinal=record.ordinal,
        elapsed=record.elapsed,
        status_code=outcome.status_code,
        total_time_us=outcome.total_time_us,
        os_error_code=outcome.os_error_code,
        error_code=int(outcome.error_code),
        error_message=outcome.error_message,
    )


def format_record_line(report: RecordReport) -> str:
    """Render one telemetry line.

    The nanosecond part of ``seconds`` is always 9 digits wide and
    ``curl_time_t`` is zero padded to at least 6 digits, so the columns
    stay stable for tools that parse by position.
    """
    return (
        f"Thread={report.ordinal}: "
        f"response_code={report.status_code}: "
        f"seconds={report.elapsed.format()}: "
        f"curl_time_t={report.total_time_us:06d}: "
        f"os_error_code={report.os_error_code}: "
        f"curl_error_code={report.error_code}: "
        f"curl_error={report.error_message}"
    )


def format_summary_line(summary: RunSummary) -> str:
    return (
        f"{summary.error_count} errors out of {summary.total_runs} runs "
        f"in {summary.elapsed.format()} real seconds"
    )


def aggregate(
    records: Sequence[WorkerRecord],
    run_elapsed: Timespec,
    *,
    silent: bool = False,
) -> RunReport:
    """Aggregate completed worker records.

    Every record contributes a telemetry line unless ``silent`` is set,
    in which case only failed records do. Lines follow ordinal order.

    Args:
        records: Completed records, indexed by ordinal.
        run_elapsed: Wall time of the whole run.
        silent: Suppress lines for successful records.

    Returns:
        The run report.
    """
    reports: list[RecordReport] = []
    lines: list[str] = []
    error_count = 0

    for record in sorted(records, key=lambda r: r.ordinal):
        report = report_record(record)
        reports.append(report)
        if report.is_error:
            error_count += 1
        if not silent or report.is_error:
            lines.append(format_record_line(report))

    summary = RunSummary(
        error_count=error_count,
        total_runs=len(reports),
        elapsed=run_elapsed,
    )
    logger.debug(
        "Aggregated %d records: %d errors in %ss",
        summary.total_runs,
        summary.error_count,
        run_elapsed.format(),
    )
    return RunReport(summary=summary, records=tuple(reports), lines=tuple(lines))
