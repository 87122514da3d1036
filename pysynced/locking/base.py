# pysynced/locking/base.py
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator


class DistributedLock(ABC):
    """
    Named mutual exclusion shared by every instance that uses the same backend.

    ``hold`` is the form callers should use: the lock is released on every
    exit path, including errors raised inside the critical section.
    """

    @abstractmethod
    def acquire(self, name: str) -> Any:
        """Blocks until the lock is held and returns a token for ``release``."""
        ...

    @abstractmethod
    def release(self, token: Any) -> None: ...

    @contextmanager
    def hold(self, name: str) -> Iterator[Any]:
        token = self.acquire(name)
        try:
            yield token
        finally:
            self.release(token)
