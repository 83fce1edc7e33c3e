"""Factory pattern for creating rate limit strategies."""

from __future__ import annotations

from typing import Any

from ratekeeper.adapters.clock import AbstractClock
from ratekeeper.adapters.rate_limit.base import AbstractRateLimitStrategy, StrategyKind
from ratekeeper.adapters.rate_limit.fixed_window import FixedWindowStrategy
from ratekeeper.adapters.rate_limit.sliding_window import SlidingWindowLogStrategy
from ratekeeper.adapters.rate_limit.token_bucket import TokenBucketStrategy
from ratekeeper.adapters.state import KeyedStateStore
from ratekeeper.core.errors import ValidationAppError

STRATEGIES: dict[StrategyKind, type[AbstractRateLimitStrategy]] = {
    StrategyKind.FIXED_WINDOW: FixedWindowStrategy,
    StrategyKind.SLIDING_WINDOW_LOG: SlidingWindowLogStrategy,
    StrategyKind.TOKEN_BUCKET: TokenBucketStrategy,
}


def resolve_strategy_kind(kind: StrategyKind | str) -> StrategyKind:
    """Map a strategy name to its StrategyKind.

    Raises:
        ValidationAppError: If the name is not a supported strategy.
    """
    if isinstance(kind, StrategyKind):
        return kind
    try:
        return StrategyKind(str(kind).strip().lower())
    except ValueError:
        supported = [member.value for member in StrategyKind]
        raise ValidationAppError(
            code="unknown_strategy",
            message=(
                f"Unknown rate limit strategy: '{kind}'. "
                f"Supported strategies: {', '.join(supported)}"
            ),
            details={"field": "strategy", "actual_value": kind, "supported": supported},
        ) from None


def create_strategy(
    kind: StrategyKind | str,
    *,
    clock: AbstractClock | None = None,
    store: KeyedStateStore[Any] | None = None,
    **options: Any,
) -> AbstractRateLimitStrategy:
    """Instantiate the strategy registered for kind.

    Args:
        kind: Strategy kind or its string value.
        clock: Time source shared by the strategy; defaults to the system clock.
        store: Optional state store (only for deliberate cross-limiter pooling).
        **options: Algorithm parameters (max_requests/window_seconds or
            refill_rate/capacity, plus optional lock_stripes).

    Returns:
        AbstractRateLimitStrategy: Configured strategy instance.

    Raises:
        ValidationAppError: If the kind is unknown, an option is missing or
            unexpected, or an option value is invalid.
    """
    resolved = resolve_strategy_kind(kind)
    strategy_cls = STRATEGIES[resolved]

    accepted = set(strategy_cls.required_options) | set(strategy_cls.optional_options)
    unexpected = sorted(set(options) - accepted)
    if unexpected:
        raise ValidationAppError(
            code="unexpected_strategy_option",
            message=(
                f"Strategy '{resolved.value}' does not accept: {', '.join(unexpected)}"
            ),
            details={"field": unexpected[0], "supported": sorted(accepted)},
        )

    missing = [name for name in strategy_cls.required_options if name not in options]
    if missing:
        raise ValidationAppError(
            code="missing_strategy_option",
            message=f"Strategy '{resolved.value}' requires: {', '.join(missing)}",
            details={"field": missing[0], "supported": sorted(accepted)},
        )

    return strategy_cls(clock=clock, store=store, **options)
