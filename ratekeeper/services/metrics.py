"""Per-limiter decision counters.

A LimiterMetrics instance is passed explicitly to each RateLimiter that
should report into it; there is no process-wide state, so independent
limiters (for example in tests) never see each other's counts.
"""

from __future__ import annotations

import threading


class LimiterMetrics:
    """Thread-safe counters for admission decisions and resets."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._allowed = 0
        self._denied = 0
        self._resets = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"LimiterMetrics(allowed={self._allowed}, denied={self._denied}, "
            f"resets={self._resets})"
        )

    def record_decision(self, allowed: bool) -> None:
        with self._lock:
            if allowed:
                self._allowed += 1
            else:
                self._denied += 1

    def record_reset(self) -> None:
        with self._lock:
            self._resets += 1

    def stats(self) -> dict[str, int]:
        """Return a snapshot of the counters."""

        with self._lock:
            return {
                "allowed": self._allowed,
                "denied": self._denied,
                "resets": self._resets,
                "total": self._allowed + self._denied,
            }

    def clear(self) -> None:
        """Reset all counters to zero."""

        with self._lock:
            self._allowed = 0
            self._denied = 0
            self._resets = 0
