# pysynced/storage/memory_storage.py
from threading import RLock
from typing import Dict, Optional

from pysynced.locking.memory_lock import MemoryLock
from pysynced.storage.base import WatermarkStore


class MemoryWatermarkStore(WatermarkStore):
    """
    Process-local store. Schedulers sharing one instance behave like separate
    application instances sharing a backend, which is what the tests rely on.
    """

    def __init__(self):
        self._watermarks: Dict[str, int] = {}
        self._lock = RLock()
        self._default_lock: Optional[MemoryLock] = None

    def get(self, key: str) -> Optional[int]:
        with self._lock:
            return self._watermarks.get(key)

    def set(self, key: str, value: int) -> None:
        with self._lock:
            self._watermarks[key] = int(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._watermarks.pop(key, None)

    def default_lock(self) -> MemoryLock:
        with self._lock:
            if self._default_lock is None:
                self._default_lock = MemoryLock()
            return self._default_lock
