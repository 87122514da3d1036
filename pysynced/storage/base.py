# pysynced/storage/base.py
from abc import ABC, abstractmethod
from typing import Optional

from pysynced.locking.base import DistributedLock


class WatermarkStore(ABC):
    """Shared key-value store holding one watermark (epoch ms) per job name."""

    @abstractmethod
    def get(self, key: str) -> Optional[int]: ...

    @abstractmethod
    def set(self, key: str, value: int) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...

    @abstractmethod
    def default_lock(self) -> DistributedLock:
        """Returns a lock provider visible to every instance sharing this store."""
        ...
