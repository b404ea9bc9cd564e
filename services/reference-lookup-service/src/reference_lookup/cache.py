"""In-memory TTL cache for normalized lookup results.

Backed by ``cachetools.TTLCache`` driven by the injected clock, so expiry
can be exercised in tests without sleeping. Entries have no capacity bound;
the keyspace is the small set of interactive queries seen by one process.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any

from cachetools import TTLCache  # type: ignore[import-untyped]

from reference_lookup.clock import Clock, SystemClock
from reference_lookup.schemas import CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


def make_cache_key(operation: str, query: str) -> str:
    """Build the cache fingerprint ``"<operation>_<query lower-cased>"``."""
    return f"{operation}_{query.lower()}"


class CacheStore:
    """Keyed store of values with a fixed time-to-live.

    A read at or beyond ``ttl`` seconds after insertion is a miss. Reads do
    not remove stale entries, but ``TTLCache`` sweeps every expired entry on
    each ``set`` (not only the key being written), and ``stats`` counts only
    live entries. A stale key therefore disappears from ``stats`` as soon as
    it expires.

    Args:
        ttl: Time-to-live in seconds (default 24 hours).
        clock: Time source; defaults to the monotonic system clock.
    """

    def __init__(
        self, ttl: float = DEFAULT_TTL_SECONDS, clock: Clock | None = None
    ) -> None:
        self._clock = clock or SystemClock()
        self._ttl = ttl
        self._lock = threading.Lock()
        self._entries: TTLCache = TTLCache(
            maxsize=math.inf, ttl=ttl, timer=self._clock.now
        )

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key``, or None on miss or staleness."""
        with self._lock:
            value = self._entries.get(key)
        if value is None:
            logger.debug("Cache miss for %s", key)
        else:
            logger.debug("Cache hit for %s", key)
        return value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, stamped with the current time."""
        with self._lock:
            self._entries[key] = value

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.info("Cache cleared (%d entries dropped)", size)

    def stats(self) -> CacheStats:
        """Return the number and keys of live entries."""
        with self._lock:
            keys = list(self._entries)
        return CacheStats(size=len(keys), keys=keys)
