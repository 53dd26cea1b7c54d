"""Diagnostic logging setup for howfast.

Diagnostics always go to stderr. Stdout is reserved for the telemetry
lines so a run can be piped through ``tee`` into a clean log file.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

_ROOT = "howfast"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, thread, message."""

    def format(self, record: logging.LogRecord) -> str:
        """Render a log record as one JSON line.

        Args:
            record: The log record to render.

        Returns:
            A single-line JSON string. A traceback, when present, is
            carried in the ``exception`` key so the line stays intact.
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(
    level: int = logging.WARNING,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Configure and return the root ``howfast`` logger.

    Repeated calls only update the level; handlers are never duplicated.

    Args:
        level: Logging level. Defaults to WARNING so that a normal run
            prints nothing but its telemetry.
        json_format: Emit structured JSON logs instead of plain text.

    Returns:
        The configured ``howfast`` logger.
    """
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(threadName)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``howfast`` namespace.

    Args:
        name: Dotted suffix appended to ``howfast.``, for example
            ``"engine.worker"`` for the worker threads.

    Returns:
        The ``logging.Logger`` named ``howfast.<name>``. It has no handler
        of its own and inherits the one installed by :func:`setup_logging`.
    """
    return logging.getLogger(f"{_ROOT}.{name}")
