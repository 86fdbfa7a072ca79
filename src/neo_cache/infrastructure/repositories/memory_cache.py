"""Memory cache.

ONLY in-memory implementation - process-local cache tier for the fast
level of a layered cache, development, testing and single-instance
deployments.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ...application.validators.cache_key_validator import validate_key, validate_name
from ...core.exceptions.cache import CacheBackendError, ProducerFailure, SerializationError
from ...utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)


@dataclass
class MemoryCacheEntry:
    """Stored value with optional absolute expiry."""
    value: Any
    expires_at: Optional[float] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if entry has expired."""
        if self.expires_at is None:
            return False
        return (now if now is not None else time.monotonic()) >= self.expires_at


class MemoryCache:
    """Thread-safe in-memory cache.

    Concurrent ``get_or_create`` calls for the same missing key run the
    producer once in this process. Entries optionally expire a fixed
    number of seconds after they were written; there is no size-based
    eviction.
    """

    def __init__(self, name: str, ttl_seconds: Optional[float] = None):
        """Initialize memory cache.

        Args:
            name: Cache name
            ttl_seconds: Optional lifetime of each entry
        """
        self._name = validate_name(name)
        self._ttl_seconds = ttl_seconds
        self._entries: Dict[str, MemoryCacheEntry] = {}
        self._lock = threading.RLock()
        self._single_flight = SingleFlight()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "expired_cleanups": 0,
        }

    @property
    def name(self) -> str:
        """Cache name."""
        return self._name

    def try_get(self, key: str) -> Tuple[bool, Any]:
        """Get value by key if present and not expired."""
        validate_key(key)

        with self._lock:
            entry = self._entries.get(key)

            if entry is None:
                self._stats["misses"] += 1
                return False, None

            if entry.is_expired():
                del self._entries[key]
                self._stats["expired_cleanups"] += 1
                self._stats["misses"] += 1
                return False, None

            self._stats["hits"] += 1
            return True, entry.value

    def set(self, key: str, value: Any) -> None:
        """Store value under key."""
        validate_key(key)

        expires_at = time.monotonic() + self._ttl_seconds if self._ttl_seconds else None

        with self._lock:
            self._entries[key] = MemoryCacheEntry(value=value, expires_at=expires_at)
            self._stats["sets"] += 1

    def get_or_create(self, key: str, producer: Callable[[], Any]) -> Any:
        """Get value by key, computing it once per concurrent wave on a miss."""
        validate_key(key)

        hit, value = self.try_get(key)
        if hit:
            return value

        return self._single_flight.do(key, lambda: self._create(key, producer))

    def _create(self, key: str, producer: Callable[[], Any]) -> Any:
        hit, value = self.try_get(key)
        if hit:
            return value

        try:
            value = producer()
        except (ProducerFailure, CacheBackendError, SerializationError):
            raise
        except Exception as e:
            logger.warning(f"Producer failed for key {key} in cache {self._name}: {e}")
            raise ProducerFailure(self._name, key, e) from e

        self.set(key, value)
        return value

    def clear(self, key: str) -> None:
        """Remove key if present."""
        validate_key(key)

        with self._lock:
            if self._entries.pop(key, None) is not None:
                self._stats["deletes"] += 1

    def clear_all(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._stats["deletes"] += len(self._entries)
            self._entries.clear()

    def cleanup_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed
        """
        now = time.monotonic()
        with self._lock:
            expired_keys = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired_keys:
                del self._entries[key]
            self._stats["expired_cleanups"] += len(expired_keys)
        return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_requests = self._stats["hits"] + self._stats["misses"]
            hit_rate = (self._stats["hits"] / total_requests * 100) if total_requests > 0 else 0.0

            return {
                **self._stats,
                "total_keys": len(self._entries),
                "hit_rate_percent": hit_rate,
                "total_requests": total_requests,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"MemoryCache(name={self._name!r})"


def create_memory_cache(name: str, ttl_seconds: Optional[float] = None) -> MemoryCache:
    """Factory function to create a memory cache."""
    return MemoryCache(name, ttl_seconds=ttl_seconds)
