"""Thread-safe keyed state with striped locks.

Notes:
- Per-process only: nothing here is shared across workers.
- Each key hashes to one lock stripe; every read, check and mutation of a
  key's state happens while that stripe is held, so decisions for a single
  key are linearizable while unrelated keys rarely contend.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, TypeVar

from ratekeeper.core.errors import ValidationAppError

S = TypeVar("S")

DEFAULT_LOCK_STRIPES = 64


class KeyedStateStore(Generic[S]):
    """Explicit key -> state map guarded by a sharded lock table.

    Entries are created on first use through entry(); there is no implicit
    auto-vivification on plain reads.
    """

    def __init__(self, *, stripes: int = DEFAULT_LOCK_STRIPES) -> None:
        """Initialize an empty store.

        Args:
            stripes: Number of locks in the lock table.

        Raises:
            ValidationAppError: If stripes is less than 1.
        """
        if isinstance(stripes, bool) or not isinstance(stripes, int) or stripes < 1:
            raise ValidationAppError(
                code="invalid_lock_stripes",
                message="stripes must be an integer >= 1",
                details={"field": "stripes", "actual_value": stripes},
            )
        self._stripes = [threading.Lock() for _ in range(stripes)]
        self._entries: dict[str, S] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _lock_for(self, key: str) -> threading.Lock:
        return self._stripes[hash(key) % len(self._stripes)]

    @contextmanager
    def entry(self, key: str, factory: Callable[[], S]) -> Iterator[S]:
        """Yield the state for key, creating it with factory() if missing.

        The key's stripe lock is held for the whole ``with`` block.
        """
        with self._lock_for(key):
            state = self._entries.get(key)
            if state is None:
                state = factory()
                self._entries[key] = state
            yield state

    @contextmanager
    def peek(self, key: str) -> Iterator[S | None]:
        """Yield the state for key (or None) under its lock without creating it."""
        with self._lock_for(key):
            yield self._entries.get(key)

    def discard(self, key: str) -> None:
        """Remove all state for key; unknown keys are ignored."""
        with self._lock_for(key):
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry, taking all stripes so no decision is mid-flight."""
        for lock in self._stripes:
            lock.acquire()
        try:
            self._entries.clear()
        finally:
            for lock in reversed(self._stripes):
                lock.release()
