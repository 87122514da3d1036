from .base import WatermarkStore
from .memory_storage import MemoryWatermarkStore
from .redis_storage import RedisWatermarkStore

try:  # Optional dependency
    from .sql_storage import SqlWatermarkStore
except ImportError:  # pragma: no cover
    SqlWatermarkStore = None  # type: ignore[assignment]

__all__ = ["WatermarkStore", "MemoryWatermarkStore", "RedisWatermarkStore", "SqlWatermarkStore"]
