"""``howfast`` — run a load test and print per-request telemetry.

Telemetry and the summary go to stdout as plain lines so a run can be
piped through ``tee``. The banner, usage errors from the environment and
fatal failures go to stderr.
"""

from __future__ import annotations

import logging
from typing import NoReturn

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from typer.core import TyperCommand

from howfast import __version__
from howfast._internal.config import RunConfiguration, load_settings
from howfast._internal.errors import ClientInitError, ConfigError, DispatchError
from howfast._internal.logging import setup_logging
from howfast.engine.runner import LoadRunner
from howfast.metrics.aggregator import format_summary_line

console = Console(stderr=True)

PROG = "howfast"


def usage_text(prog: str = PROG) -> str:
    return (
        f"Usage: {prog} -u URL -r number of runs [-s produce less output]\n"
        "Pipe through tee to create a logfile\n"
        f"\t{prog} -u http://localhost -r 30000 | tee full.log\n"
        f"\t{prog} -u http://localhost -r 30000 -s | tee error.log"
    )


def _usage_exit() -> NoReturn:
    typer.echo(usage_text())
    raise typer.Exit(code=1)


class UsageOnErrorCommand(TyperCommand):
    """Report malformed arguments with the usage text instead of click's error.

    A non-numeric run count, an option missing its value and an unknown
    option all print the usage text to stdout and exit 1, like a run count
    of zero.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            console.print(f"[red]Error:[/red] {escape(exc.format_message())}")
            _usage_exit()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG} {__version__}")
        raise typer.Exit


def run_cmd(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Target URL every worker requests.",
    ),
    runs: int = typer.Option(
        0,
        "--runs",
        "-r",
        help="Number of workers, one request each.",
    ),
    silent: bool = typer.Option(
        False,
        "--silent",
        "-s",
        help="Only print lines for failed requests.",
    ),
    pacing_us: int | None = typer.Option(
        None,
        "--pacing-us",
        help="Microseconds between worker creations (default: 150, env HOWFAST_PACING_US).",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Per-request timeout in seconds (default: none, env HOWFAST_TIMEOUT).",
    ),
    deadline: float | None = typer.Option(
        None,
        "--deadline",
        help="Abort if workers are still running after this many seconds "
        "(default: none, env HOWFAST_DEADLINE).",
    ),
    fail_on_http_error: bool = typer.Option(
        True,
        "--fail-on-http-error/--no-fail-on-http-error",
        help="Count HTTP status >= 400 as an error. Redirects are not followed "
        "and 3xx counts as success.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging on stderr.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit diagnostics as JSON lines.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Fire ``runs`` concurrent GET requests at ``url``."""
    setup_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        json_format=log_json,
    )

    if not url or runs <= 0:
        _usage_exit()

    try:
        settings = load_settings()
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    config = RunConfiguration(
        url=url or "",
        runs=runs,
        silent=silent,
        pacing_us=pacing_us if pacing_us is not None else settings.pacing_us,
        request_timeout=timeout if timeout is not None else settings.request_timeout,
        deadline=deadline if deadline is not None else settings.deadline,
        fail_on_http_error=fail_on_http_error,
    )

    try:
        config.validate()
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        _usage_exit()

    console.print(
        Panel(
            f"[bold]Target:[/bold] {escape(config.url)}\n"
            f"[bold]Runs:[/bold]   {config.runs}\n"
            f"[bold]Pacing:[/bold] {config.pacing_us}us",
            title=PROG,
            border_style="cyan",
        )
    )

    try:
        report = LoadRunner(config).run()
    except DispatchError as exc:
        console.print(f"[red]Fatal:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except ClientInitError as exc:
        console.print(f"[red]Unable to initialize HTTP client:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    for line in report.lines:
        typer.echo(line)
    typer.echo(format_summary_line(report.summary))
