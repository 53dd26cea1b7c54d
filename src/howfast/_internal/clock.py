"""Second/nanosecond timestamps with borrow-normalized subtraction."""

from __future__ import annotations

import time
from dataclasses import dataclass

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, order=True)
class Timespec:
    """A point in time (or a duration) split into seconds and nanoseconds.

    Attributes:
        seconds: Whole seconds.
        nanoseconds: Sub-second part, ``0 <= nanoseconds < 1e9`` once
            normalized.
    """

    seconds: int
    nanoseconds: int

    @classmethod
    def from_ns(cls, total_ns: int) -> Timespec:
        """Build a Timespec from a nanosecond count."""
        seconds, nanoseconds = divmod(total_ns, NANOS_PER_SECOND)
        return cls(seconds, nanoseconds)

    @classmethod
    def now(cls) -> Timespec:
        """Read the monotonic clock."""
        return cls.from_ns(time.monotonic_ns())

    def __sub__(self, other: Timespec) -> Timespec:
        seconds = self.seconds - other.seconds
        nanoseconds = self.nanoseconds - other.nanoseconds
        if nanoseconds < 0:
            seconds -= 1
            nanoseconds += NANOS_PER_SECOND
        return Timespec(seconds, nanoseconds)

    @property
    def total_seconds(self) -> float:
        return self.seconds + self.nanoseconds / NANOS_PER_SECOND

    def format(self) -> str:
        """Render as ``<sec>.<nanoseconds padded to 9 digits>``."""
        return f"{self.seconds}.{self.nanoseconds:09d}"


ZERO = Timespec(0, 0)

