"""Per-provider fixed-window rate limiting.

Each provider gets an independent counter that resets wholesale once its
window has elapsed. Bursts at window boundaries are possible.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass

from reference_lookup.clock import Clock, SystemClock
from reference_lookup.schemas import ProviderKind

logger = logging.getLogger(__name__)


@dataclass
class RateWindowState:
    """Call accounting for one provider's current window."""

    calls_made: int
    max_calls: int
    window_reset_at: float


class RateLimiter:
    """Fixed-window call counter keyed by provider.

    Args:
        limits: Maximum calls per window for each provider.
        window_seconds: Window length in seconds.
        clock: Time source; defaults to the monotonic system clock.
    """

    def __init__(
        self,
        limits: Mapping[ProviderKind, int],
        window_seconds: float = 60.0,
        clock: Clock | None = None,
    ) -> None:
        self._limits = dict(limits)
        self._window = window_seconds
        self._clock = clock or SystemClock()
        self._lock = threading.Lock()
        self._windows: dict[ProviderKind, RateWindowState] = {}

    def can_call(self, provider: ProviderKind) -> bool:
        """Return True if ``provider`` has budget left in its window."""
        with self._lock:
            state = self._current_window(provider)
            return state.calls_made < state.max_calls

    def record_call(self, provider: ProviderKind) -> None:
        """Count one attempted provider call against the current window."""
        with self._lock:
            state = self._current_window(provider)
            state.calls_made += 1
            if state.calls_made >= state.max_calls:
                logger.debug(
                    "Rate window for %s exhausted (%d/%d)",
                    provider.value,
                    state.calls_made,
                    state.max_calls,
                )

    def snapshot(self, provider: ProviderKind) -> RateWindowState:
        """Return a copy of the provider's window after any pending reset."""
        with self._lock:
            state = self._current_window(provider)
            return RateWindowState(
                calls_made=state.calls_made,
                max_calls=state.max_calls,
                window_reset_at=state.window_reset_at,
            )

    def _current_window(self, provider: ProviderKind) -> RateWindowState:
        # Caller holds self._lock.
        now = self._clock.now()
        state = self._windows.get(provider)
        if state is None:
            state = RateWindowState(
                calls_made=0,
                max_calls=self._limits[provider],
                window_reset_at=now + self._window,
            )
            self._windows[provider] = state
        elif now > state.window_reset_at:
            state.calls_made = 0
            state.window_reset_at = now + self._window
        return state
