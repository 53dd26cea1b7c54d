"""Custom exception hierarchy for howfast."""

from __future__ import annotations


class HowFastError(Exception):
    """Base exception for all howfast errors.

    All custom exceptions in howfast inherit from this class, making it
    easy to catch any howfast-specific error with a single except clause.
    """


class ConfigError(HowFastError):
    """Raised when configuration is invalid or missing.

    Examples:
        - The target URL is empty.
        - The requested number of runs is zero.
        - An environment variable has an invalid value.
    """


class ClientInitError(HowFastError):
    """Raised when an HTTP client object cannot be constructed.

    This is distinct from a failed request: no network work happened.
    Typically caused by descriptor exhaustion at high concurrency.
    """


class DispatchError(HowFastError):
    """Fatal failure of the worker concurrency machinery.

    Attributes:
        ordinal: Ordinal of the worker that could not be created or joined.
    """

    def __init__(self, ordinal: int, message: str) -> None:
        super().__init__(message)
        self.ordinal = ordinal


class WorkerSpawnError(DispatchError):
    """Raised when a worker thread cannot be created or started."""

    def __init__(self, ordinal: int, reason: str = "") -> None:
        message = f"unable to start worker thread_num {ordinal}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(ordinal, message)


class WorkerJoinError(DispatchError):
    """Raised when a worker thread cannot be joined."""

    def __init__(self, ordinal: int, reason: str = "") -> None:
        message = f"unable to join worker thread_num {ordinal}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(ordinal, message)


class DeadlineExceededError(DispatchError):
    """Raised when a worker is still running after the run deadline."""

    def __init__(self, ordinal: int, deadline: float) -> None:
        super().__init__(
            ordinal,
            f"worker thread_num {ordinal} still running after {deadline:g}s deadline",
        )
        self.deadline = deadline
