"""In-memory token bucket.

Tokens accrue continuously at refill_rate per second up to capacity and
each admitted request spends exactly one. A new key starts with a full
bucket, which permits an initial burst of up to capacity requests.
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
class _BucketState:
    tokens: float
    last_refill: float


class TokenBucketStrategy(AbstractRateLimitStrategy):
    """Admit requests while a per-key bucket holds at least one token."""

    kind = StrategyKind.TOKEN_BUCKET
    required_options = ("refill_rate", "capacity")

    def __init__(
        self,
        *,
        refill_rate: float,
        capacity: int,
        clock: AbstractClock | None = None,
        store: KeyedStateStore[Any] | None = None,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        """Initialize the token bucket strategy.

        Args:
            refill_rate: Tokens added per second (0 means the bucket never refills).
            capacity: Maximum tokens a bucket can hold.
            clock: Time source; defaults to the system clock.
            store: Optional pre-built state store.
            lock_stripes: Lock table size when no store is given.

        Raises:
            ValidationAppError: If refill_rate or capacity are invalid.
        """
        self._refill_rate = require_rate(
            "refill_rate", refill_rate, code="invalid_refill_rate", allow_zero=True
        )
        self._capacity = require_count("capacity", capacity, code="invalid_capacity")
        super().__init__(clock=clock, store=store, lock_stripes=lock_stripes)

    @property
    def limit(self) -> int:
        return self._capacity

    def _new_bucket(self) -> _BucketState:
        return _BucketState(tokens=float(self._capacity), last_refill=self._clock.now())

    def _refill(self, bucket: _BucketState, now: float) -> None:
        elapsed = max(0.0, now - bucket.last_refill)
        bucket.tokens = min(float(self._capacity), bucket.tokens + elapsed * self._refill_rate)
        bucket.last_refill = now

    def consume(self, key: str) -> RateLimitResult:
        with self._store.entry(key, self._new_bucket) as bucket:
            now = self._clock.now()
            self._refill(bucket, now)

            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return self._allowed(remaining=math.floor(bucket.tokens))

            if self._refill_rate == 0 or self._capacity < 1:
                wait = None
            else:
                wait = (1.0 - bucket.tokens) / self._refill_rate
            return self._blocked(remaining=0, wait_seconds=wait)

    def current_usage(self, key: str) -> int:
        """Return the whole tokens left in key's bucket after refilling.

        An unseen key reports a full bucket without creating state.
        """
        with self._store.peek(key) as bucket:
            if bucket is None:
                return self._capacity
            self._refill(bucket, self._clock.now())
            return math.floor(bucket.tokens)
