"""
Per-hostel mutual exclusion for read-modify-write of hostel trees.

A hostel document embeds its whole floor/room tree, so every mutation is a
load, an in-memory edit and a full rewrite of the ``floors`` field. The
registry hands out one re-entrant lock per hostel id so that, when enabled,
those sequences run one at a time inside this process.
"""

import threading
from contextlib import contextmanager, nullcontext
from typing import Dict, Iterator

from hostel_portal.config.logging import get_logger

logger = get_logger(__name__)


class HostelLockRegistry:
    """Lazily created ``RLock`` per hostel id."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def lock_for(self, hostel_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(hostel_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[hostel_id] = lock
            return lock

    @contextmanager
    def _held(self, hostel_id: str) -> Iterator[None]:
        lock = self.lock_for(hostel_id)
        with lock:
            logger.debug("Acquired hostel lock", extra={"hostel_id": hostel_id})
            yield

    def hold(self, hostel_id: str):
        """Context manager serializing writers of one hostel (no-op when disabled)."""
        if not self.enabled:
            return nullcontext()
        return self._held(hostel_id)

    def discard(self, hostel_id: str) -> None:
        """Forget the lock of a deleted hostel."""
        with self._guard:
            self._locks.pop(hostel_id, None)

    def __contains__(self, hostel_id: str) -> bool:
        with self._guard:
            return hostel_id in self._locks
