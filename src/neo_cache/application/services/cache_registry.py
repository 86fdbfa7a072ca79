"""Cache registry service.

ONLY cache resolution - thread-safe mapping from cache name patterns to
cache instances, resolving lookups to the most specific matching pattern.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ...core.entities.registered_cache import RegisteredCache
from ...core.exceptions.cache import InvalidArgumentError
from ...core.protocols.cache import Cache, as_capability
from ...core.protocols.notification_channel import NotificationChannel
from ...core.value_objects.cache_name import CacheName
from ...utils.locks import ReadWriteLock
from ..validators.cache_key_validator import validate_name

logger = logging.getLogger(__name__)

NotifierFactory = Callable[[str], NotificationChannel]


class CacheRegistry:
    """Cache registry service.

    Resolves a dotted cache name such as ``orders.daily.totals`` to the
    registered cache whose pattern covers it most specifically:

    - an exact pattern beats any wildcard pattern covering the same name
    - among wildcard patterns, the longest literal prefix wins
    - remaining ties go to the pattern registered first

    Lookups run concurrently under a shared lock on a snapshot of the
    rows; registrations and removals are exclusive.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._lock = ReadWriteLock()
        self._caches: Dict[CacheName, RegisteredCache] = {}
        self._notifiers: Dict[str, NotifierFactory] = {}
        self._channels: List[NotificationChannel] = []

    # Registration

    def register(self, pattern: str, cache: Optional[Cache]) -> None:
        """Add, replace or remove the cache registered under pattern.

        A synchronized cache that is replaced or removed, and is no longer
        registered under any other pattern, is detached from its channel.

        Args:
            pattern: Cache name, may end with ``*`` to cover a prefix
            cache: Cache to register, None removes the pattern
        """
        cache_name = CacheName(validate_name(pattern, "pattern"))

        with self._lock.write_locked():
            if cache is None:
                previous = self._caches.pop(cache_name, None)
            else:
                previous = self._caches.get(cache_name)
                self._caches[cache_name] = RegisteredCache(pattern=cache_name, cache=cache)

            orphaned = previous is not None and not any(
                row.cache is previous.cache for row in self._caches.values()
            )

        if cache is None:
            if previous is not None:
                logger.debug(f"Removed cache registration: pattern={pattern}")
        else:
            logger.debug(f"Registered cache: pattern={pattern}, cache={cache.name}")

        if orphaned:
            self._detach(previous.cache)

    @staticmethod
    def _detach(cache: Cache) -> None:
        synchronizer = getattr(cache, "synchronizer", None)
        if synchronizer is not None:
            synchronizer.detach()

    def remove(self, pattern: str) -> None:
        """Remove the cache registered under pattern, if any."""
        self.register(pattern, None)

    def remove_all(self) -> None:
        """Remove every cache registration."""
        with self._lock.write_locked():
            rows = list(self._caches.values())
            self._caches.clear()

        for cache in {id(row.cache): row.cache for row in rows}.values():
            self._detach(cache)

        logger.debug(f"Removed all cache registrations: count={len(rows)}")

    # Resolution

    def resolve(self, name: str) -> Optional[Cache]:
        """Resolve a cache name to its most specific registered cache.

        Args:
            name: Requested cache name

        Returns:
            The matching cache, or None if no pattern covers the name

        Raises:
            InvalidArgumentError: If name is None
        """
        validate_name(name)

        best: Optional[RegisteredCache] = None
        best_rank = None

        for row in self._snapshot():
            if not row.covers(name):
                continue

            rank = (row.score(name), not row.pattern.has_wildcard)
            if best_rank is None or rank > best_rank:
                best, best_rank = row, rank

        return best.cache if best is not None else None

    def resolve_typed(self, name: str, capability: type) -> Optional[Any]:
        """Resolve a cache name and narrow it to a capability.

        Args:
            name: Requested cache name
            capability: Cache class or runtime-checkable protocol expected

        Returns:
            The matching cache as ``capability``, or None if no pattern
            covers the name. An unmatched name is not a type mismatch, so
            callers can tell "not configured" apart from "wrong kind of
            cache".

        Raises:
            TypeMismatchError: If the matching cache does not provide
                ``capability``
        """
        return as_capability(self.resolve(name), capability, name)

    def resolve_for_class(self, cls: type) -> Optional[Cache]:
        """Resolve the cache named after a class's fully qualified name."""
        return self.resolve(f"{cls.__module__}.{cls.__qualname__}")

    def list_names(self) -> List[str]:
        """Get the names of all registered caches."""
        return [row.cache.name for row in self._snapshot()]

    def __contains__(self, pattern: str) -> bool:
        with self._lock.read_locked():
            return CacheName(pattern) in self._caches

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._caches)

    # Notification providers

    def register_notifier(self, provider_name: str, factory: Optional[NotifierFactory]) -> None:
        """Add, replace or remove a notification provider.

        Args:
            provider_name: Name caches refer to in ``sync_provider``
            factory: Callable creating the channel for a cache name,
                None removes the provider
        """
        validate_name(provider_name, "provider_name")

        with self._lock.write_locked():
            if factory is None:
                self._notifiers.pop(provider_name, None)
            else:
                self._notifiers[provider_name] = factory

    def get_notifier_for_cache(self, cache_name: str, provider_name: str) -> Optional[NotificationChannel]:
        """Create the notification channel a cache synchronizes through.

        Args:
            cache_name: Name of the cache being synchronized
            provider_name: Registered notification provider name

        Returns:
            Notification channel, or None if the provider is not registered.
            The registry closes every channel it hands out on shutdown.
        """
        validate_name(cache_name, "cache_name")
        validate_name(provider_name, "provider_name")

        with self._lock.read_locked():
            factory = self._notifiers.get(provider_name)

        if factory is None:
            logger.warning(f"Notification provider not registered: provider={provider_name}, cache={cache_name}")
            return None

        channel = factory(cache_name)
        if channel is not None:
            with self._lock.write_locked():
                if not any(known is channel for known in self._channels):
                    self._channels.append(channel)

        return channel

    # Lifecycle

    def shutdown(self) -> None:
        """Drain the registry.

        Closes every registered cache that can be closed, then every
        notification channel handed out by ``get_notifier_for_cache``, and
        removes all registrations and notification providers.
        """
        with self._lock.write_locked():
            rows = list(self._caches.values())
            channels, self._channels = self._channels, []
            self._caches.clear()
            self._notifiers.clear()

        closed = set()
        for row in rows:
            close = getattr(row.cache, "close", None)
            if close is None or id(row.cache) in closed:
                continue
            closed.add(id(row.cache))
            try:
                close()
            except Exception as e:
                logger.error(f"Failed to close cache {row.cache.name}: {e}")

        for channel in channels:
            close = getattr(channel, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as e:
                logger.error(f"Failed to close notification channel {channel!r}: {e}")

        logger.info(f"Cache registry shut down: caches={len(rows)}, channels={len(channels)}")

    def _snapshot(self) -> List[RegisteredCache]:
        """Copy the current rows under the read lock."""
        with self._lock.read_locked():
            return list(self._caches.values())


_default_registry: Optional[CacheRegistry] = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> CacheRegistry:
    """Get the process-wide registry, creating it on first use."""
    global _default_registry

    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = CacheRegistry()
        return _default_registry


def reset_default_registry() -> None:
    """Shut down and discard the process-wide registry."""
    global _default_registry

    with _default_registry_lock:
        registry, _default_registry = _default_registry, None

    if registry is not None:
        registry.shutdown()


def create_cache_registry() -> CacheRegistry:
    """Create an empty cache registry."""
    return CacheRegistry()
