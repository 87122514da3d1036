from .base import DistributedLock
from .memory_lock import MemoryLock
from .redis_lock import RedisLock

try:  # Optional dependency
    from .sql_lock import SqlLock
except ImportError:  # pragma: no cover
    SqlLock = None  # type: ignore[assignment]

__all__ = ["DistributedLock", "MemoryLock", "RedisLock", "SqlLock"]
