"""Worker records and the body each worker thread runs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiohttp

from howfast._internal.clock import Timespec
from howfast._internal.errors import ClientInitError
from howfast._internal.logging import get_logger
from howfast.engine.outcome import (
    Failure,
    TransportError,
    classify_exception,
    describe,
    errno_of,
)

if TYPE_CHECKING:
    from howfast._internal.types import Clock
    from howfast.engine.executor import RequestExecutor
    from howfast.engine.outcome import Outcome

logger = get_logger("engine.worker")


@dataclass
class WorkerRecord:
    """Timing and outcome of one worker.

    Each record is written only by the thread that owns its ordinal and
    is read-only once that thread has been joined.

    Attributes:
        ordinal: Worker index, 0..N-1. Fixes the telemetry order.
        url: Target URL.
        start: Timestamp taken just before the request.
        end: Timestamp taken after the request, always set on completion.
        outcome: Request outcome, set on completion.
    """

    ordinal: int
    url: str
    start: Timespec | None = None
    end: Timespec | None = None
    outcome: Outcome | None = None

    @property
    def completed(self) -> bool:
        return self.end is not None and self.outcome is not None

    @property
    def elapsed(self) -> Timespec:
        """Time between start and end.

        Raises:
            ValueError: If the worker has not completed.
        """
        if self.start is None or self.end is None:
            msg = f"worker {self.ordinal} has not completed"
            raise ValueError(msg)
        return self.end - self.start

    @property
    def is_error(self) -> bool:
        return isinstance(self.outcome, Failure)


def allocate_records(url: str, runs: int) -> list[WorkerRecord]:
    """Pre-allocate one record slot per ordinal."""
    return [WorkerRecord(ordinal=i, url=url) for i in range(runs)]


def run_worker(
    record: WorkerRecord,
    executor: RequestExecutor,
    clock: Clock = Timespec.now,
) -> None:
    """Execute one request and fill in ``record``.

    The end timestamp is recorded even when the HTTP client could not be
    initialized; that case is logged as a distinct diagnostic and recorded
    as a ``FAILED_INIT`` failure. An executor defect, such as a closed
    :class:`HttpContext`, is logged with its traceback and recorded as
    ``BAD_FUNCTION_ARGUMENT`` rather than a transport code.

    Args:
        record: The slot owned by this worker.
        executor: Executor to perform the request with.
        clock: Timestamp source.
    """
    record.start = clock()
    outcome: Outcome
    try:
        outcome = executor.execute(record.url)
    except ClientInitError as exc:
        logger.error(
            "unable to initialize HTTP client for thread_number: %d: %s",
            record.ordinal,
            exc,
        )
        outcome = Failure(
            error_code=TransportError.FAILED_INIT,
            os_error_code=errno_of(exc.__cause__) if exc.__cause__ else 0,
            error_message=str(exc),
        )
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
        code, os_error_code, message = classify_exception(exc)
        outcome = Failure(
            error_code=code,
            os_error_code=os_error_code,
            error_message=message,
        )
    except Exception as exc:
        logger.exception("Worker %d: executor failed", record.ordinal)
        outcome = Failure(
            error_code=TransportError.BAD_FUNCTION_ARGUMENT,
            os_error_code=0,
            error_message=describe(exc),
        )
    finally:
        record.end = clock()
    record.outcome = outcome
