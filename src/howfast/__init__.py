"""howfast — how fast is your server? Staggered thread-per-request HTTP load."""

from __future__ import annotations

from howfast._internal.clock import Timespec
from howfast._internal.config import RunConfiguration
from howfast.engine.dispatcher import Dispatcher
from howfast.engine.executor import HttpContext, RequestExecutor
from howfast.engine.outcome import Failure, Success, TransportError
from howfast.engine.runner import LoadRunner
from howfast.engine.worker import WorkerRecord
from howfast.metrics.aggregator import aggregate
from howfast.metrics.models import RunReport, RunSummary

__version__ = "0.1.0"

__all__ = [
    "Dispatcher",
    "Failure",
    "HttpContext",
    "LoadRunner",
    "RequestExecutor",
    "RunConfiguration",
    "RunReport",
    "RunSummary",
    "Success",
    "Timespec",
    "TransportError",
    "WorkerRecord",
    "aggregate",
]
