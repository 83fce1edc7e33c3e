"""Controllable clock for deterministic tests."""

from __future__ import annotations

import math
import threading

from ratekeeper.adapters.clock.base import AbstractClock
from ratekeeper.core.errors import ValidationAppError


class ManualClock(AbstractClock):
    """Clock that only moves when advance() is called.

    Attributes:
        start: Initial instant in seconds.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._current = float(start)
        self._lock = threading.Lock()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"ManualClock(now={self._current})"

    def now(self) -> float:
        with self._lock:
            return self._current

    def advance(self, seconds: float) -> float:
        """Move time forward without blocking.

        Args:
            seconds: Finite, non-negative amount of time to add.

        Returns:
            The new current instant.

        Raises:
            ValidationAppError: If seconds is negative or not finite.
        """

        if not math.isfinite(seconds) or seconds < 0:
            raise ValidationAppError(
                code="clock_invalid_advance",
                message="ManualClock can only move forward by a finite amount",
                details={"field": "seconds", "actual_value": seconds},
            )
        with self._lock:
            self._current += seconds
            return self._current
