"""In-memory fixed-window counter.

Notes:
- O(1) time and space per key.
- Windows are aligned to the clock (floor(now / window) * window), not to a
  key's first request, so all keys share the same boundaries.
- A full quota spent at the end of one window and another full quota at the
  start of the next are both admitted (up to 2 * max_requests in a short span).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from ratekeeper.adapters.clock import AbstractClock
from ratekeeper.adapters.rate_limit.base import (
    AbstractRateLimitStrategy,
    RateLimitResult,
    StrategyKind,
    require_count,
    require_rate,
)
from ratekeeper.adapters.state import KeyedStateStore
from ratekeeper.adapters.state.keyed import DEFAULT_LOCK_STRIPES


@dataclass
class _WindowState:
    window_start: float | None = None
    count: int = 0


class FixedWindowStrategy(AbstractRateLimitStrategy):
    """Limit requests per key within discrete, clock-aligned windows."""

    kind = StrategyKind.FIXED_WINDOW
    required_options = ("max_requests", "window_seconds")

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        clock: AbstractClock | None = None,
        store: KeyedStateStore[Any] | None = None,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        """Initialize the fixed-window strategy.

        Args:
            max_requests: Maximum admitted requests per window (0 denies all).
            window_seconds: Size of each window in seconds.
            clock: Time source; defaults to the system clock.
            store: Optional pre-built state store.
            lock_stripes: Lock table size when no store is given.

        Raises:
            ValidationAppError: If max_requests or window_seconds are invalid.
        """
        self._max_requests = require_count(
            "max_requests", max_requests, code="invalid_max_requests"
        )
        self._window_seconds = require_rate(
            "window_seconds", window_seconds, code="invalid_window", allow_zero=False
        )
        super().__init__(clock=clock, store=store, lock_stripes=lock_stripes)

    @property
    def limit(self) -> int:
        return self._max_requests

    def _get_window_bounds(self, now: float) -> tuple[float, float]:
        """Return (window_start, window_end) for the window containing now."""
        window_start = math.floor(now / self._window_seconds) * self._window_seconds
        return window_start, window_start + self._window_seconds

    def consume(self, key: str) -> RateLimitResult:
        with self._store.entry(key, _WindowState) as state:
            now = self._clock.now()
            window_start, window_end = self._get_window_bounds(now)

            if state.window_start != window_start:
                state.window_start = window_start
                state.count = 0

            if state.count < self._max_requests:
                state.count += 1
                return self._allowed(remaining=self._max_requests - state.count)

            wait = None if self._max_requests == 0 else window_end - now
            return self._blocked(remaining=0, wait_seconds=wait)

    def current_usage(self, key: str) -> int:
        with self._store.peek(key) as state:
            if state is None:
                return 0
            window_start, _ = self._get_window_bounds(self._clock.now())
            if state.window_start != window_start:
                return 0
            return state.count
