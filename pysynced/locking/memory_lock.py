# pysynced/locking/memory_lock.py
from threading import Lock
from typing import Dict, Optional

from pysynced.common.exceptions import LockAcquisitionError
from pysynced.locking.base import DistributedLock


class MemoryLock(DistributedLock):
    def __init__(self, acquire_timeout: Optional[float] = None):
        self.acquire_timeout = acquire_timeout
        self._locks: Dict[str, Lock] = {}
        self._guard = Lock()

    def _lock_for(self, name: str) -> Lock:
        with self._guard:
            if name not in self._locks:
                self._locks[name] = Lock()
            return self._locks[name]

    def acquire(self, name: str) -> Lock:
        lock = self._lock_for(name)
        timeout = -1 if self.acquire_timeout is None else self.acquire_timeout
        if not lock.acquire(timeout=timeout):
            raise LockAcquisitionError(
                f"Could not acquire lock {name!r} within {self.acquire_timeout}s"
            )
        return lock

    def release(self, token: Lock) -> None:
        token.release()

    def locked(self, name: str) -> bool:
        return self._lock_for(name).locked()
