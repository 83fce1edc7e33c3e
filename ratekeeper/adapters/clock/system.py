"""Wall-clock time source."""

from __future__ import annotations

import threading
import time
from typing import Callable

from ratekeeper.adapters.clock.base import AbstractClock


class SystemClock(AbstractClock):
    """Clock backed by the system wall clock.

    Fixed windows are aligned to epoch seconds, so this reads ``time.time``
    rather than ``time.monotonic``. If the OS clock is stepped backwards the
    last observed value is returned until real time catches up.
    """

    def __init__(self, source: Callable[[], float] = time.time) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._last = float("-inf")

    def now(self) -> float:
        current = self._source()
        with self._lock:
            if current < self._last:
                return self._last
            self._last = current
            return current
