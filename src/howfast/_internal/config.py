"""Run configuration and environment settings for howfast."""

from __future__ import annotations

import os
from dataclasses import dataclass

from howfast._internal.errors import ConfigError

DEFAULT_PACING_US = 150
"""Default stagger between worker creations, in microseconds.

Tuned empirically on Linux hosts with roughly 30K threads per process.
Lower values caused connect and resolve failures there. Adjust per
platform; ``/proc/sys/kernel/threads-max`` bounds useful ``runs`` values.
"""


@dataclass(frozen=True)
class RunConfiguration:
    """Immutable configuration for one load run.

    Attributes:
        url: Target URL every worker requests.
        runs: Number of workers (one request each).
        silent: Suppress telemetry lines for successful requests.
        pacing_us: Minimum delay between worker creations in microseconds.
        request_timeout: Optional total timeout per request in seconds.
            ``None`` waits indefinitely.
        deadline: Optional overall deadline in seconds for joining all
            workers. ``None`` waits indefinitely.
        fail_on_http_error: Count HTTP status >= 400 as a request error.
    """

    url: str
    runs: int
    silent: bool = False
    pacing_us: int = DEFAULT_PACING_US
    request_timeout: float | None = None
    deadline: float | None = None
    fail_on_http_error: bool = True

    def validate(self) -> None:
        """Check the configuration before any worker is created.

        Raises:
            ConfigError: If any field is out of range.
        """
        if not self.url:
            msg = "a target URL is required"
            raise ConfigError(msg)
        if self.runs < 1:
            msg = f"number of runs must be >= 1, got: {self.runs}"
            raise ConfigError(msg)
        if self.pacing_us < 0:
            msg = f"pacing must be >= 0 microseconds, got: {self.pacing_us}"
            raise ConfigError(msg)
        if self.request_timeout is not None and self.request_timeout <= 0:
            msg = f"request timeout must be positive, got: {self.request_timeout}"
            raise ConfigError(msg)
        if self.deadline is not None and self.deadline <= 0:
            msg = f"deadline must be positive, got: {self.deadline}"
            raise ConfigError(msg)


@dataclass(frozen=True)
class Settings:
    """Environment-provided defaults for tunables the CLI may override.

    Attributes:
        pacing_us: Stagger between worker creations in microseconds.
        request_timeout: Per-request timeout in seconds, or None.
        deadline: Overall join deadline in seconds, or None.
    """

    pacing_us: int = DEFAULT_PACING_US
    request_timeout: float | None = None
    deadline: float | None = None


def _positive_float(name: str) -> float | None:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        msg = f"{name} must be a number, got: {raw!r}"
        raise ConfigError(msg) from None
    if value <= 0:
        msg = f"{name} must be positive, got: {value}"
        raise ConfigError(msg)
    return value


def load_settings() -> Settings:
    """Load tunables from environment variables with defaults.

    Environment variables:
        HOWFAST_PACING_US: Worker creation stagger (default: 150).
        HOWFAST_TIMEOUT: Per-request timeout in seconds (default: none).
        HOWFAST_DEADLINE: Overall join deadline in seconds (default: none).

    Returns:
        Populated Settings instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    pacing_str = os.environ.get("HOWFAST_PACING_US", str(DEFAULT_PACING_US))

    try:
        pacing_us = int(pacing_str)
    except ValueError:
        msg = f"HOWFAST_PACING_US must be an integer, got: {pacing_str!r}"
        raise ConfigError(msg) from None

    if pacing_us < 0:
        msg = f"HOWFAST_PACING_US must be >= 0, got: {pacing_us}"
        raise ConfigError(msg)

    return Settings(
        pacing_us=pacing_us,
        request_timeout=_positive_float("HOWFAST_TIMEOUT"),
        deadline=_positive_float("HOWFAST_DEADLINE"),
    )
