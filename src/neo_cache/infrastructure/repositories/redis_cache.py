"""Redis cache.

ONLY Redis implementation - distributed cache tier shared by every process
pointing at the same Redis, typically the level 2 tier of a layered cache.
"""

import logging
import re
from typing import Any, Callable, Optional, Tuple

import redis
from redis.exceptions import LockError, RedisError

from ...application.validators.cache_key_validator import validate_key, validate_name
from ...core.exceptions.cache import CacheBackendError, ProducerFailure, SerializationError
from ...core.protocols.cache_serializer import CacheSerializer
from ...utils.single_flight import SingleFlight
from ..serializers.pickle_serializer import PickleCacheSerializer

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so text matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisCache:
    """Redis cache.

    Keys are stored as ``{key_prefix}{cache_name}:{key}`` and producer
    locks as ``{key_prefix}lock:{cache_name}:{key}``, outside the range
    ``clear_all`` scans. Concurrent
    ``get_or_create`` calls for the same key run the producer once per
    process through a local single flight, and once across processes
    through a Redis lock held while the producer runs.
    """

    def __init__(
        self,
        name: str,
        client: redis.Redis,
        serializer: Optional[CacheSerializer] = None,
        key_prefix: str = "neo:cache:",
        ttl_seconds: Optional[int] = None,
        lock_timeout_seconds: float = 30.0,
        lock_blocking_timeout_seconds: float = 10.0
    ):
        """Initialize Redis cache.

        Args:
            name: Cache name
            client: Synchronous Redis client
            serializer: Value serializer, pickle when omitted
            key_prefix: Prefix prepended to every stored key
            ttl_seconds: Optional expiry applied on every write
            lock_timeout_seconds: Lifetime of the producer lock
            lock_blocking_timeout_seconds: How long to wait for another
                process's producer before computing anyway
        """
        self._name = validate_name(name)
        self._client = client
        self._serializer = serializer or PickleCacheSerializer()
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds
        self._lock_timeout = lock_timeout_seconds
        self._lock_blocking_timeout = lock_blocking_timeout_seconds
        self._single_flight = SingleFlight()

    @property
    def name(self) -> str:
        """Cache name."""
        return self._name

    @property
    def client(self) -> redis.Redis:
        """Underlying Redis client."""
        return self._client

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}{self._name}:{key}"

    def _make_lock_key(self, key: str) -> str:
        return f"{self._key_prefix}lock:{self._name}:{key}"

    def _make_scan_pattern(self) -> str:
        return f"{_escape_glob(self._key_prefix)}{_escape_glob(self._name)}:*"

    def try_get(self, key: str) -> Tuple[bool, Any]:
        """Get value by key."""
        validate_key(key)

        try:
            data = self._client.get(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis get failed for key {key} in cache {self._name}: {e}")
            raise CacheBackendError(self._name, "get", e) from e

        if data is None:
            return False, None

        return True, self._serializer.deserialize(data)

    def set(self, key: str, value: Any) -> None:
        """Store value under key."""
        validate_key(key)

        data = self._serializer.serialize(value)

        try:
            self._client.set(self._make_key(key), data, ex=self._ttl_seconds)
        except RedisError as e:
            logger.error(f"Redis set failed for key {key} in cache {self._name}: {e}")
            raise CacheBackendError(self._name, "set", e) from e

    def get_or_create(self, key: str, producer: Callable[[], Any]) -> Any:
        """Get value by key, computing it once across processes on a miss."""
        validate_key(key)

        hit, value = self.try_get(key)
        if hit:
            return value

        return self._single_flight.do(key, lambda: self._create_locked(key, producer))

    def _create_locked(self, key: str, producer: Callable[[], Any]) -> Any:
        lock = self._client.lock(
            self._make_lock_key(key),
            timeout=self._lock_timeout,
            blocking_timeout=self._lock_blocking_timeout
        )

        try:
            acquired = lock.acquire()
        except RedisError as e:
            raise CacheBackendError(self._name, "lock", e) from e

        if not acquired:
            logger.warning(f"Timed out waiting for producer lock on key {key} in cache {self._name}, computing locally")
            return self._create(key, producer)

        try:
            return self._create(key, producer)
        finally:
            try:
                lock.release()
            except LockError as e:
                logger.warning(f"Producer lock for key {key} in cache {self._name} expired before release: {e}")

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

        try:
            self._client.delete(self._make_key(key))
        except RedisError as e:
            raise CacheBackendError(self._name, "delete", e) from e

    def clear_all(self) -> None:
        """Remove every key of this cache."""
        try:
            keys = list(self._client.scan_iter(match=self._make_scan_pattern(), count=1000))
            for start in range(0, len(keys), 1000):
                self._client.delete(*keys[start:start + 1000])
        except RedisError as e:
            raise CacheBackendError(self._name, "clear_all", e) from e

        logger.debug(f"Cleared {len(keys)} keys from cache {self._name}")

    def close(self) -> None:
        """Close the Redis connection pool."""
        self._client.close()

    def __repr__(self) -> str:
        return f"RedisCache(name={self._name!r}, prefix={self._key_prefix!r})"


def create_redis_cache(
    name: str,
    client: redis.Redis,
    serializer: Optional[CacheSerializer] = None,
    **kwargs
) -> RedisCache:
    """Factory function to create a Redis cache."""
    return RedisCache(name, client, serializer=serializer, **kwargs)
