"""Rate limit strategy interfaces.

The facade depends on this abstraction (not a concrete algorithm) so the
strategy is chosen once at construction and never inspected afterwards.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from ratekeeper.adapters.clock import AbstractClock, SystemClock
from ratekeeper.adapters.state import KeyedStateStore
from ratekeeper.adapters.state.keyed import DEFAULT_LOCK_STRIPES
from ratekeeper.core.errors import ValidationAppError


class StrategyKind(str, Enum):
    """Closed set of supported admission algorithms."""

    FIXED_WINDOW = "fixed_window"
    SLIDING_WINDOW_LOG = "sliding_window_log"
    TOKEN_BUCKET = "token_bucket"


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a single admission decision.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Configured quota (max requests per window, or bucket capacity).
        remaining: Quota still available right after this decision.
        retry_after_seconds: Suggested wait before retrying when blocked;
            None when allowed or when the quota can never recover.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int | None


def _retry_after(seconds: float) -> int:
    return max(0, int(math.ceil(seconds)))


def require_count(name: str, value: Any, *, code: str) -> int:
    """Validate a non-negative integer option."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationAppError(
            code=code,
            message=f"{name} must be an integer >= 0",
            details={"field": name, "actual_value": value},
        )
    return value


def require_rate(name: str, value: Any, *, code: str, allow_zero: bool) -> float:
    """Validate a finite, non-negative (or strictly positive) number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        valid = False
    else:
        valid = math.isfinite(value) and (value >= 0 if allow_zero else value > 0)
    if not valid:
        bound = ">= 0" if allow_zero else "> 0"
        raise ValidationAppError(
            code=code,
            message=f"{name} must be a finite number {bound}",
            details={"field": name, "actual_value": value},
        )
    return float(value)


class AbstractRateLimitStrategy(ABC):
    """Interface for admission algorithms.

    Each strategy owns one KeyedStateStore (unless one is passed in) and
    performs every read-check-mutate sequence inside the key's critical
    section, reading the clock while the lock is held.
    """

    kind: ClassVar[StrategyKind]
    required_options: ClassVar[tuple[str, ...]] = ()
    optional_options: ClassVar[tuple[str, ...]] = ("lock_stripes",)

    def __init__(
        self,
        *,
        clock: AbstractClock | None = None,
        store: KeyedStateStore[Any] | None = None,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        self._clock = clock if clock is not None else SystemClock()
        self._store = store if store is not None else KeyedStateStore(stripes=lock_stripes)

    @property
    @abstractmethod
    def limit(self) -> int:
        """Configured quota for a single key."""
        raise NotImplementedError

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Decide whether a request for key may proceed and record it if so.

        Args:
            key: Caller identity (user id, API token, IP, ...).

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError

    @abstractmethod
    def current_usage(self, key: str) -> int:
        """Return key's usage count (requests in window, or tokens left) without consuming any."""
        raise NotImplementedError

    def allow(self, key: str) -> bool:
        """Return True if the request may proceed."""
        return self.consume(key).allowed

    def reset(self, key: str) -> None:
        """Forget all state for key, as if it had never been seen."""
        self._store.discard(key)

    def _blocked(self, *, remaining: int, wait_seconds: float | None) -> RateLimitResult:
        """Build a RateLimitResult for a denied request."""
        return RateLimitResult(
            allowed=False,
            limit=self.limit,
            remaining=remaining,
            retry_after_seconds=None if wait_seconds is None else _retry_after(wait_seconds),
        )

    def _allowed(self, *, remaining: int) -> RateLimitResult:
        """Build a RateLimitResult for an admitted request."""
        return RateLimitResult(
            allowed=True,
            limit=self.limit,
            remaining=remaining,
            retry_after_seconds=None,
        )
