"""Staggered thread-per-request dispatch."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

from howfast._internal.clock import Timespec
from howfast._internal.config import DEFAULT_PACING_US
from howfast._internal.errors import (
    DeadlineExceededError,
    WorkerJoinError,
    WorkerSpawnError,
)
from howfast._internal.logging import get_logger
from howfast.engine.worker import allocate_records, run_worker

if TYPE_CHECKING:
    from collections.abc import Callable

    from howfast._internal.types import Clock, Sleeper
    from howfast.engine.executor import RequestExecutor
    from howfast.engine.worker import WorkerRecord

    ThreadFactory = Callable[..., threading.Thread]

logger = get_logger("engine.dispatcher")


class Dispatcher:
    """Creates one thread per request, staggered, and joins them all.

    The pacing delay bounds how fast threads are *created*, not how many
    run at once: every started worker runs to completion concurrently with
    the others.

    Attributes:
        pacing_us: Delay between thread creations in microseconds.
        deadline: Optional overall join deadline in seconds, measured from
            the start of :meth:`dispatch`.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        *,
        pacing_us: int = DEFAULT_PACING_US,
        deadline: float | None = None,
        clock: Clock = Timespec.now,
        sleep: Sleeper = time.sleep,
        thread_factory: ThreadFactory = threading.Thread,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            executor: Executor every worker calls once.
            pacing_us: Delay between thread creations in microseconds.
            deadline: Optional overall join deadline in seconds.
            clock: Timestamp source handed to each worker.
            sleep: Blocking sleep used for pacing.
            thread_factory: Thread constructor, ``threading.Thread`` by
                default.
        """
        self.pacing_us = pacing_us
        self.deadline = deadline
        self._executor = executor
        self._clock = clock
        self._sleep = sleep
        self._thread_factory = thread_factory

    def dispatch(self, url: str, runs: int) -> list[WorkerRecord]:
        """Run ``runs`` workers against ``url`` and return their records.

        Args:
            url: Target URL.
            runs: Number of workers to create.

        Returns:
            Completed records, indexed by ordinal.

        Raises:
            WorkerSpawnError: If a worker thread cannot be started.
            WorkerJoinError: If a worker thread cannot be joined.
            DeadlineExceededError: If a worker is still running when the
                deadline expires.
        """
        started_at = time.monotonic()
        records = allocate_records(url, runs)
        threads = self._spawn_all(records)
        logger.debug("Started %d worker threads", len(threads))
        self._join_all(threads, started_at)
        logger.debug("Joined %d worker threads", len(threads))
        return records

    def _spawn_all(self, records: list[WorkerRecord]) -> list[threading.Thread]:
        pacing_seconds = self.pacing_us / 1_000_000
        threads: list[threading.Thread] = []

        for record in records:
            try:
                thread = self._thread_factory(
                    target=run_worker,
                    args=(record, self._executor, self._clock),
                    name=f"howfast-worker-{record.ordinal}",
                    daemon=True,
                )
                thread.start()
            except (RuntimeError, OSError) as exc:
                logger.error("Worker %d could not be started: %s", record.ordinal, exc)
                raise WorkerSpawnError(record.ordinal, str(exc)) from exc
            threads.append(thread)

            if pacing_seconds > 0:
                self._sleep(pacing_seconds)

        return threads

    def _join_all(self, threads: list[threading.Thread], started_at: float) -> None:
        for ordinal, thread in enumerate(threads):
            timeout = None
            if self.deadline is not None:
                timeout = max(0.0, started_at + self.deadline - time.monotonic())

            try:
                thread.join(timeout=timeout)
            except RuntimeError as exc:
                raise WorkerJoinError(ordinal, str(exc)) from exc

            if self.deadline is not None and thread.is_alive():
                logger.warning(
                    "Worker %d still running after %.3fs deadline",
                    ordinal,
                    self.deadline,
                )
                raise DeadlineExceededError(ordinal, self.deadline)
