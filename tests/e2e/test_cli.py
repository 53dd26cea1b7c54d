"""End-to-end tests for the howfast CLI."""

from __future__ import annotations

import re

import pytest
from typer.testing import CliRunner

from howfast import __version__
from howfast.cli.app import app

runner = CliRunner()

_RECORD_LINE = re.compile(
    r"^Thread=\d+: response_code=\d+: seconds=\d+\.\d{9}: curl_time_t=\d{6,}: "
    r"os_error_code=-?\d+: curl_error_code=\d+: curl_error=.*$"
)
_SUMMARY_LINE = re.compile(r"^(\d+) errors out of (\d+) runs in \d+\.\d{9} real seconds$")


def _telemetry(output: str) -> tuple[list[str], list[re.Match[str]]]:
    lines = output.splitlines()
    records = [line for line in lines if _RECORD_LINE.match(line)]
    summaries = [m for m in map(_SUMMARY_LINE.match, lines) if m]
    return records, summaries


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("HOWFAST_PACING_US", "HOWFAST_TIMEOUT", "HOWFAST_DEADLINE"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Tests: version, help and usage
# ---------------------------------------------------------------------------


def test_version_flag():
    """--version prints version and exits 0."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_version_short_flag():
    """-V also prints version."""
    result = runner.invoke(app, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_output():
    """--help lists the core options."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "--url" in result.output
    assert "--runs" in result.output
    assert "--silent" in result.output


def test_no_arguments_prints_usage():
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert "Usage: howfast -u URL -r number of runs" in result.output


def test_missing_url_prints_usage():
    result = runner.invoke(app, ["-r", "10"])
    assert result.exit_code == 1
    assert "Usage:" in result.output


def test_zero_runs_prints_usage():
    result = runner.invoke(app, ["-u", "http://127.0.0.1/", "-r", "0"])
    assert result.exit_code == 1
    assert "Usage:" in result.output
    assert "errors out of" not in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["-u", "http://127.0.0.1/", "-r", "abc"],
        ["-u", "http://127.0.0.1/", "-r"],
        ["-r", "10", "-u"],
        ["-u", "http://127.0.0.1/", "-r", "5", "--no-such-option"],
    ],
    ids=["non-numeric-runs", "runs-without-value", "url-without-value", "unknown-option"],
)
def test_malformed_arguments_print_usage(args: list[str]):
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert "Usage: howfast -u URL -r number of runs" in result.stdout
    assert "errors out of" not in result.output


def test_help_mentions_http_error_cutoff():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "3xx" in result.output


def test_invalid_env_setting_exits_non_zero(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOWFAST_PACING_US", "soon")
    result = runner.invoke(app, ["-u", "http://127.0.0.1/", "-r", "1"])
    assert result.exit_code == 1


# ---------------------------------------------------------------------------
# Tests: runs
# ---------------------------------------------------------------------------


@pytest.mark.timeout(30)
def test_run_prints_every_line(sync_target_server: str):
    result = runner.invoke(app, ["-u", f"{sync_target_server}/health", "-r", "5"])

    assert result.exit_code == 0, result.output
    records, summaries = _telemetry(result.output)
    assert len(records) == 5
    assert [line.split(":")[0] for line in records] == [f"Thread={i}" for i in range(5)]
    assert len(summaries) == 1
    assert summaries[0].group(1, 2) == ("0", "5")


@pytest.mark.timeout(30)
def test_silent_run_suppresses_successes(sync_target_server: str):
    result = runner.invoke(app, ["-u", f"{sync_target_server}/health", "-r", "10", "-s"])

    assert result.exit_code == 0, result.output
    records, summaries = _telemetry(result.output)
    assert records == []
    assert summaries[0].group(1, 2) == ("0", "10")


@pytest.mark.timeout(30)
def test_silent_run_still_reports_errors(closed_port_url: str):
    result = runner.invoke(app, ["-u", closed_port_url, "-r", "4", "-s"])

    assert result.exit_code == 0, result.output
    records, summaries = _telemetry(result.output)
    assert len(records) == 4
    assert all("curl_error_code=7" in line for line in records)
    assert summaries[0].group(1, 2) == ("4", "4")


@pytest.mark.timeout(30)
def test_pacing_and_timeout_options(sync_target_server: str):
    result = runner.invoke(
        app,
        [
            "-u",
            f"{sync_target_server}/delay?delay=2",
            "-r",
            "2",
            "--pacing-us",
            "1000",
            "--timeout",
            "0.2",
        ],
    )

    assert result.exit_code == 0, result.output
    records, summaries = _telemetry(result.output)
    assert all("curl_error_code=28" in line for line in records)
    assert summaries[0].group(1, 2) == ("2", "2")


@pytest.mark.timeout(30)
def test_deadline_exceeded_is_fatal(sync_target_server: str):
    result = runner.invoke(
        app,
        ["-u", f"{sync_target_server}/delay?delay=3", "-r", "2", "--deadline", "0.3"],
    )

    assert result.exit_code == 1
    assert "thread_num 0" in result.output
    assert "errors out of" not in result.output
