"""
Per-poll mutual exclusion.

Every stake, vote and lifecycle transition on a poll runs under that
poll's lock. Locks are re-entrant so the market service can hold one
while calling into the ledger, tally and resolution engine.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class PollLocks:
    """Lazily created RLock per poll id."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def for_poll(self, poll_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(poll_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[poll_id] = lock
            return lock

    @contextmanager
    def hold(self, poll_id: str) -> Iterator[None]:
        """Context manager form of for_poll(poll_id)."""
        with self.for_poll(poll_id):
            yield
