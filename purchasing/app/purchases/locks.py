"""Per (package, host) serialization of purchases."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, Tuple

LockKey = Tuple[Hashable, Hashable]


class PurchaseLocks:
    """One re-entrant lock per (package, host), dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[LockKey, threading.RLock] = {}
        self._holders: Dict[LockKey, int] = {}

    @contextmanager
    def hold(self, package_id: Hashable, host_id: Hashable) -> Iterator[None]:
        key = (package_id, host_id)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            self._holders[key] = self._holders.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._holders[key] -= 1
                if not self._holders[key]:
                    del self._holders[key]
                    del self._locks[key]

    def __contains__(self, key: object) -> bool:
        with self._guard:
            return key in self._locks

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
