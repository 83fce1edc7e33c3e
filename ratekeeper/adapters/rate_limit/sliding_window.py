"""In-memory sliding window log.

Every admitted request's timestamp is kept until it falls out of the
trailing window [now - window, now]. Pruning happens on each check for a
key, so a log never holds more than max_requests entries.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque

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


class SlidingWindowLogStrategy(AbstractRateLimitStrategy):
    """Thread-safe sliding window limiter backed by per-key timestamp logs."""

    kind = StrategyKind.SLIDING_WINDOW_LOG
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
        """Initialise limiter parameters and per-key storage."""
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

    def _prune(self, log: Deque[float], now: float) -> None:
        # Timestamps are appended under the key lock with a non-decreasing
        # clock, so the log is sorted and expired entries sit at the left.
        cutoff = now - self._window_seconds
        while log and log[0] < cutoff:
            log.popleft()

    def consume(self, key: str) -> RateLimitResult:
        with self._store.entry(key, deque) as log:
            now = self._clock.now()
            self._prune(log, now)

            if len(log) < self._max_requests:
                log.append(now)
                return self._allowed(remaining=self._max_requests - len(log))

            wait = log[0] + self._window_seconds - now if log else None
            return self._blocked(remaining=0, wait_seconds=wait)

    def current_usage(self, key: str) -> int:
        with self._store.peek(key) as log:
            if log is None:
                return 0
            self._prune(log, self._clock.now())
            return len(log)
