"""Pytest configuration and fixtures shared across all test modules.

APP_ENV is pinned before any ratekeeper import so settings never pick up a
developer's local .env.development file during tests.
"""

import os

# Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

from typing import Callable

import pytest

from ratekeeper.adapters.clock import ManualClock
from ratekeeper.adapters.rate_limit import StrategyKind
from ratekeeper.services.rate_limiter import RateLimiter

LimiterBuilder = Callable[..., RateLimiter]


@pytest.fixture
def clock() -> ManualClock:
    """Controllable clock starting at t=0."""
    return ManualClock(start=0.0)


@pytest.fixture
def make_limiter(clock: ManualClock) -> LimiterBuilder:
    """Build a limiter of any kind whose quota at a single instant is `limit`.

    Token buckets get capacity=limit; window strategies get max_requests=limit.
    """

    def _build(
        kind: StrategyKind,
        *,
        limit: int,
        window_seconds: float = 60.0,
        refill_rate: float = 1.0,
    ) -> RateLimiter:
        if kind is StrategyKind.TOKEN_BUCKET:
            return RateLimiter.build(
                kind, clock=clock, capacity=limit, refill_rate=refill_rate
            )
        return RateLimiter.build(
            kind, clock=clock, max_requests=limit, window_seconds=window_seconds
        )

    return _build
