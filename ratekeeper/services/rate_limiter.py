"""Rate limiter facade.

Callers (request middleware, job runners) depend on RateLimiter only:
- allow() once per unit of work, treating False as "reject"
- current_usage() to expose quota headers or metrics
- reset() for administrative overrides

The bound strategy is fixed for the life of the limiter.
"""

from __future__ import annotations

import logging
from typing import Any

from ratekeeper.adapters.clock import AbstractClock
from ratekeeper.adapters.rate_limit.base import (
    AbstractRateLimitStrategy,
    RateLimitResult,
    StrategyKind,
)
from ratekeeper.adapters.rate_limit.factory import create_strategy, resolve_strategy_kind
from ratekeeper.adapters.state import KeyedStateStore
from ratekeeper.core.config import LimiterSettings, settings
from ratekeeper.core.logging import LimiterKeyFilter
from ratekeeper.services.metrics import LimiterMetrics

logger = logging.getLogger(__name__)
logger.addFilter(LimiterKeyFilter())


class RateLimiter:
    """Public decision API bound to a single strategy instance."""

    def __init__(
        self,
        strategy: AbstractRateLimitStrategy,
        *,
        metrics: LimiterMetrics | None = None,
    ) -> None:
        self._strategy = strategy
        self._metrics = metrics

    @classmethod
    def build(
        cls,
        kind: StrategyKind | str,
        *,
        clock: AbstractClock | None = None,
        store: KeyedStateStore[Any] | None = None,
        metrics: LimiterMetrics | None = None,
        **options: Any,
    ) -> "RateLimiter":
        """Construct a limiter and its strategy in one step.

        Raises:
            ValidationAppError: If the strategy or its options are invalid.
        """
        strategy = create_strategy(kind, clock=clock, store=store, **options)
        return cls(strategy, metrics=metrics)

    @property
    def kind(self) -> StrategyKind:
        return self._strategy.kind

    @property
    def limit(self) -> int:
        return self._strategy.limit

    def consume(self, key: str) -> RateLimitResult:
        """Run an admission decision for key and return its full result."""

        result = self._strategy.consume(key)
        if self._metrics is not None:
            self._metrics.record_decision(result.allowed)

        if result.allowed:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "rate_limit.allowed",
                    extra={
                        "limiter_key": key,
                        "strategy": self.kind.value,
                        "limit": result.limit,
                        "remaining": result.remaining,
                    },
                )
            return result

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "limiter_key": key,
                "strategy": self.kind.value,
                "limit": result.limit,
                "remaining": result.remaining,
                "retry_after_s": result.retry_after_seconds,
            },
        )
        return result

    def allow(self, key: str) -> bool:
        """Return True if a request for key may proceed now."""
        return self.consume(key).allowed

    def reset(self, key: str) -> None:
        """Clear all state for key; unknown keys are ignored."""
        self._strategy.reset(key)
        if self._metrics is not None:
            self._metrics.record_reset()
        logger.info(
            "rate_limit.reset",
            extra={"limiter_key": key, "strategy": self.kind.value},
        )

    def current_usage(self, key: str) -> int:
        """Return key's strategy-specific usage count without consuming quota.

        Window strategies report admitted requests in the current window; the
        token bucket reports whole tokens left in the bucket.
        """
        return self._strategy.current_usage(key)


def create_rate_limiter(
    limiter_settings: LimiterSettings | None = None,
    *,
    clock: AbstractClock | None = None,
    metrics: LimiterMetrics | None = None,
) -> RateLimiter:
    """Build a RateLimiter from settings.

    Reads configuration from ratekeeper.core.config.settings unless explicit
    settings are given. Only the options relevant to the selected strategy
    are passed through.

    Returns:
        RateLimiter: Configured limiter.

    Raises:
        ValidationAppError: If the configured strategy is unknown.
    """
    cfg = limiter_settings or settings.limiter
    kind = resolve_strategy_kind(cfg.strategy)

    if kind is StrategyKind.TOKEN_BUCKET:
        options: dict[str, Any] = {
            "refill_rate": cfg.refill_rate,
            "capacity": cfg.capacity,
        }
    else:
        options = {
            "max_requests": cfg.max_requests,
            "window_seconds": cfg.window_seconds,
        }

    limiter = RateLimiter.build(
        kind,
        clock=clock,
        metrics=metrics,
        lock_stripes=cfg.lock_stripes,
        **options,
    )
    logger.info(
        "rate_limit.configured",
        extra={"strategy": kind.value, "limit": limiter.limit},
    )
    return limiter
