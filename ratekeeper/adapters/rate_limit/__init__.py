"""Rate limiting strategies.

This package provides the admission algorithms behind a common interface
so the facade can bind any of them without knowing which one it holds.
"""

from ratekeeper.adapters.rate_limit.base import (
    AbstractRateLimitStrategy,
    RateLimitResult,
    StrategyKind,
)
from ratekeeper.adapters.rate_limit.factory import create_strategy, resolve_strategy_kind
from ratekeeper.adapters.rate_limit.fixed_window import FixedWindowStrategy
from ratekeeper.adapters.rate_limit.sliding_window import SlidingWindowLogStrategy
from ratekeeper.adapters.rate_limit.token_bucket import TokenBucketStrategy

__all__ = [
    "AbstractRateLimitStrategy",
    "FixedWindowStrategy",
    "RateLimitResult",
    "SlidingWindowLogStrategy",
    "StrategyKind",
    "TokenBucketStrategy",
    "create_strategy",
    "resolve_strategy_kind",
]
