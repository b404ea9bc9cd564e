"""Time source used by the cache and rate limiter."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Anything with a ``now()`` returning seconds as a float."""

    def now(self) -> float:
        """Return the current time in seconds."""
        ...


class SystemClock:
    """Monotonic wall clock. Unaffected by system clock adjustments."""

    def now(self) -> float:
        """Return ``time.monotonic()``."""
        return time.monotonic()
