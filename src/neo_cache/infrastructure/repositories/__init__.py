"""Cache tier implementations."""

from .memory_cache import MemoryCache, MemoryCacheEntry, create_memory_cache
from .no_cache import NoCache
from .redis_cache import RedisCache, create_redis_cache

__all__ = [
    "MemoryCache",
    "MemoryCacheEntry",
    "create_memory_cache",
    "NoCache",
    "RedisCache",
    "create_redis_cache",
]
