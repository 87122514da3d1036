# pysynced/storage/redis_storage.py
import logging
from typing import Optional

import redis

from .base import WatermarkStore
from ..locking.redis_lock import RedisLock

logger = logging.getLogger(__name__)


class RedisWatermarkStore(WatermarkStore):
    def __init__(self, connection_pool=None, redis_client=None, key_prefix: str = ""):
        if redis_client:
            self.redis_client = redis_client
            if not getattr(self.redis_client, "decode_responses", False):
                self.redis_client = redis.Redis(
                    connection_pool=self.redis_client.connection_pool,
                    decode_responses=True,
                )
        elif connection_pool:
            self.redis_client = redis.Redis(
                connection_pool=connection_pool, decode_responses=True
            )
        else:
            self.redis_client = redis.Redis(
                host="localhost", port=6379, db=0, decode_responses=True
            )
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[int]:
        reply = self.redis_client.get(self._key(key))
        if reply is None:
            return None
        try:
            return int(reply)
        except ValueError:
            # Values written by other clients may carry a fractional part
            logger.warning(f"Watermark {key!r} holds non-integer value {reply!r}")
            return int(float(reply))

    def set(self, key: str, value: int) -> None:
        self.redis_client.set(self._key(key), int(value))

    def delete(self, key: str) -> None:
        self.redis_client.delete(self._key(key))

    def default_lock(self) -> RedisLock:
        return RedisLock(self.redis_client, key_prefix=self.key_prefix)
