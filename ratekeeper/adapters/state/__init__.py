"""Per-key state storage shared by the rate limit strategies."""

from ratekeeper.adapters.state.keyed import KeyedStateStore

__all__ = ["KeyedStateStore"]
