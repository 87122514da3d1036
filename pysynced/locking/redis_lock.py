# pysynced/locking/redis_lock.py
import logging
from typing import Optional

import redis
from redis.exceptions import LockNotOwnedError

from pysynced.common.exceptions import LockAcquisitionError
from pysynced.locking.base import DistributedLock

logger = logging.getLogger(__name__)


class RedisLock(DistributedLock):
    """
    Lock backed by redis-py's ``Redis.lock``.

    ``timeout`` is the lock TTL in seconds. It is None by default, so a holder
    that dies inside the critical section keeps the lock until someone deletes
    the key. ``blocking_timeout`` bounds how long ``acquire`` waits.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        timeout: Optional[float] = None,
        blocking_timeout: Optional[float] = None,
        sleep: float = 0.1,
        key_prefix: str = "",
    ):
        self.redis_client = redis_client
        self.timeout = timeout
        self.blocking_timeout = blocking_timeout
        self.sleep = sleep
        self.key_prefix = key_prefix

    def acquire(self, name: str):
        lock = self.redis_client.lock(
            f"{self.key_prefix}{name}",
            timeout=self.timeout,
            sleep=self.sleep,
            blocking=True,
            blocking_timeout=self.blocking_timeout,
        )
        if not lock.acquire():
            raise LockAcquisitionError(
                f"Could not acquire lock {name!r} within {self.blocking_timeout}s"
            )
        return lock

    def release(self, token) -> None:
        try:
            token.release()
        except LockNotOwnedError:
            logger.warning(
                f"Lock {token.name!r} expired before release; "
                "another instance may have entered the critical section"
            )
