"""Time sources.

Strategies depend on AbstractClock only, so production code reads the
system clock while tests drive a ManualClock without sleeping.
"""

from ratekeeper.adapters.clock.base import AbstractClock
from ratekeeper.adapters.clock.manual import ManualClock
from ratekeeper.adapters.clock.system import SystemClock

__all__ = [
    "AbstractClock",
    "ManualClock",
    "SystemClock",
]
