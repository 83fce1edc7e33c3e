"""Clock interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractClock(ABC):
    """Interface for time sources used by rate limit strategies."""

    @abstractmethod
    def now(self) -> float:
        """Return the current instant in seconds (fractional).

        Successive calls must never return a smaller value.
        """
        raise NotImplementedError
