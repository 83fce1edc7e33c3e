"""ratekeeper - in-process rate limiting with pluggable algorithms."""

from ratekeeper.adapters.clock import AbstractClock, ManualClock, SystemClock
from ratekeeper.adapters.rate_limit import (
    AbstractRateLimitStrategy,
    FixedWindowStrategy,
    RateLimitResult,
    SlidingWindowLogStrategy,
    StrategyKind,
    TokenBucketStrategy,
    create_strategy,
)
from ratekeeper.adapters.state import KeyedStateStore
from ratekeeper.core.errors import AppError, ValidationAppError
from ratekeeper.services.metrics import LimiterMetrics
from ratekeeper.services.rate_limiter import RateLimiter, create_rate_limiter

__all__ = [
    "AbstractClock",
    "AbstractRateLimitStrategy",
    "AppError",
    "FixedWindowStrategy",
    "KeyedStateStore",
    "LimiterMetrics",
    "ManualClock",
    "RateLimitResult",
    "RateLimiter",
    "SlidingWindowLogStrategy",
    "StrategyKind",
    "SystemClock",
    "TokenBucketStrategy",
    "ValidationAppError",
    "create_rate_limiter",
    "create_strategy",
]
