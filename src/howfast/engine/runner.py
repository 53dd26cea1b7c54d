"""Top-level run orchestrator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from howfast._internal.clock import Timespec
from howfast._internal.logging import get_logger
from howfast.engine.dispatcher import Dispatcher
from howfast.engine.executor import HttpContext, RequestExecutor
from howfast.metrics.aggregator import aggregate

if TYPE_CHECKING:
    from collections.abc import Callable

    from howfast._internal.config import RunConfiguration
    from howfast._internal.types import Clock
    from howfast.metrics.models import RunReport

    DispatcherFactory = Callable[[RequestExecutor, RunConfiguration], Dispatcher]

logger = get_logger("engine.runner")


def _default_dispatcher(
    executor: RequestExecutor,
    config: RunConfiguration,
) -> Dispatcher:
    return Dispatcher(
        executor,
        pacing_us=config.pacing_us,
        deadline=config.deadline,
    )


class LoadRunner:
    """Runs one configured load test from start to report.

    Wires together: configuration validation, the HTTP context lifecycle,
    staggered dispatch and result aggregation. Fatal dispatch errors are
    raised to the caller; deciding whether to exit the process is left to
    the entry point.

    Attributes:
        config: The run configuration.
    """

    def __init__(
        self,
        config: RunConfiguration,
        *,
        clock: Clock = Timespec.now,
        dispatcher_factory: DispatcherFactory = _default_dispatcher,
    ) -> None:
        """Initialize the runner.

        Args:
            config: The run configuration.
            clock: Timestamp source for the whole-run timing.
            dispatcher_factory: Builds the Dispatcher for an executor and
                configuration.
        """
        self.config = config
        self._clock = clock
        self._dispatcher_factory = dispatcher_factory

    def run(self) -> RunReport:
        """Execute the run and return its report.

        This is a blocking call that returns once every worker has been
        joined.

        Returns:
            RunReport with per-worker telemetry and the summary.

        Raises:
            ConfigError: If the configuration is invalid. No worker is
                created in that case.
            ClientInitError: If the HTTP context cannot be opened.
            DispatchError: If a worker cannot be started or joined.
        """
        config = self.config
        config.validate()

        logger.info(
            "Starting run: url=%s, runs=%d, pacing=%dus",
            config.url,
            config.runs,
            config.pacing_us,
        )

        run_start = self._clock()
        context = HttpContext(
            request_timeout=config.request_timeout,
            fail_on_http_error=config.fail_on_http_error,
        )
        with context:
            dispatcher = self._dispatcher_factory(RequestExecutor(context), config)
            records = dispatcher.dispatch(config.url, config.runs)
        run_end = self._clock()

        report = aggregate(records, run_end - run_start, silent=config.silent)

        logger.info(
            "Run completed: %d errors out of %d runs in %ss",
            report.summary.error_count,
            report.summary.total_runs,
            report.summary.elapsed.format(),
        )
        return report
