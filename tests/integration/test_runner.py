"""Integration tests for the LoadRunner."""

from __future__ import annotations

import pytest

from howfast._internal.config import RunConfiguration
from howfast._internal.errors import ConfigError, WorkerSpawnError
from howfast.engine.dispatcher import Dispatcher
from howfast.engine.runner import LoadRunner
from howfast.metrics.aggregator import format_summary_line


@pytest.mark.timeout(30)
class TestLoadRunner:
    def test_fast_target_has_no_errors(self, sync_target_server: str):
        config = RunConfiguration(url=f"{sync_target_server}/health", runs=10, silent=True)

        report = LoadRunner(config).run()

        assert report.summary.error_count == 0
        assert report.summary.total_runs == 10
        assert report.lines == ()
        assert format_summary_line(report.summary).startswith("0 errors out of 10 runs in ")

    def test_verbose_run_reports_every_worker(self, sync_target_server: str):
        config = RunConfiguration(url=f"{sync_target_server}/health", runs=4)

        report = LoadRunner(config).run()

        assert len(report.lines) == 4
        assert all("response_code=200" in line for line in report.lines)

    def test_unreachable_target_counts_every_error(self, closed_port_url: str):
        config = RunConfiguration(url=closed_port_url, runs=5, silent=True)

        report = LoadRunner(config).run()

        assert report.summary.error_count == 5
        assert len(report.lines) == 5

    def test_http_errors_counted(self, sync_target_server: str):
        config = RunConfiguration(url=f"{sync_target_server}/error?status=500", runs=3)

        report = LoadRunner(config).run()

        assert report.summary.error_count == 3
        assert all("curl_error_code=22" in line for line in report.lines)

    def test_http_errors_ignored_when_disabled(self, sync_target_server: str):
        config = RunConfiguration(
            url=f"{sync_target_server}/error?status=500",
            runs=3,
            fail_on_http_error=False,
        )

        report = LoadRunner(config).run()

        assert report.summary.error_count == 0

    def test_run_elapsed_covers_workers(self, sync_target_server: str):
        config = RunConfiguration(url=f"{sync_target_server}/delay?delay=0.3", runs=3)

        report = LoadRunner(config).run()

        longest = max(r.elapsed for r in report.records)
        assert report.summary.elapsed >= longest
        assert report.summary.elapsed.total_seconds >= 0.3


class TestLoadRunnerFailures:
    def test_invalid_config_creates_no_workers(self):
        created: list[object] = []

        def _factory(executor, config):
            created.append(executor)
            return Dispatcher(executor)

        with pytest.raises(ConfigError):
            LoadRunner(RunConfiguration(url="", runs=0), dispatcher_factory=_factory).run()

        assert created == []

    def test_dispatch_error_propagates_and_closes_context(self):
        contexts = []

        class _FailingDispatcher:
            def dispatch(self, url: str, runs: int):
                raise WorkerSpawnError(0, "can't start new thread")

        def _factory(executor, config):
            contexts.append(executor.context)
            return _FailingDispatcher()

        config = RunConfiguration(url="http://localhost", runs=1)
        with pytest.raises(WorkerSpawnError):
            LoadRunner(config, dispatcher_factory=_factory).run()

        assert len(contexts) == 1
        assert not contexts[0].is_open
