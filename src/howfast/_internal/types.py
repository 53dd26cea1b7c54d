"""Shared type aliases for howfast."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from howfast._internal.clock import Timespec

# HTTP headers dictionary.
Headers = dict[str, str]

# Zero-argument timestamp source, e.g. ``Timespec.now``.
Clock = Callable[[], "Timespec"]

# Blocking sleep taking seconds, e.g. ``time.sleep``.
Sleeper = Callable[[float], None]
