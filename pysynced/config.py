# pysynced/config.py
from typing import Optional
from pysynced.locking.base import DistributedLock
from pysynced.storage.base import WatermarkStore

class _GlobalConfig:
    def __init__(self):
        self.store: Optional[WatermarkStore] = None
        self.lock: Optional[DistributedLock] = None

_GLOBAL_CONFIG = _GlobalConfig()

def configure(store: WatermarkStore, lock: Optional[DistributedLock] = None) -> None:
    _GLOBAL_CONFIG.store = store
    _GLOBAL_CONFIG.lock = lock

def get_store() -> WatermarkStore:
    if not _GLOBAL_CONFIG.store:
        raise RuntimeError("pysynced has not been configured. Call pysynced.configure() first.")
    return _GLOBAL_CONFIG.store

def get_lock() -> DistributedLock:
    if _GLOBAL_CONFIG.lock is None:
        return get_store().default_lock()
    return _GLOBAL_CONFIG.lock
