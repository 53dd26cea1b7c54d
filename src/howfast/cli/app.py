"""Main Typer application — entry point for the ``howfast`` CLI."""

from __future__ import annotations

import typer

from howfast.cli.run import UsageOnErrorCommand, run_cmd

app = typer.Typer(
    name="howfast",
    help="Fire N concurrent GET requests at one URL and time each of them.",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(
    "run",
    cls=UsageOnErrorCommand,
    help="Run a staggered thread-per-request load test against a URL.",
)(run_cmd)


def main() -> None:
    """Console script entry point."""
    app()
