"""Layered cache service.

ONLY tier composition - a cache made of a fast local tier (level 1) in
front of a shared authoritative tier (level 2), e.g. an in-memory cache
that falls back to a distributed cache.
"""

import logging
from typing import Any, Callable, Optional, Tuple

from ...core.exceptions.cache import ConfigurationError, SynchronizationError
from ...core.protocols.cache import Cache
from ...core.value_objects.layered_cache_policy import LayeredCachePolicy
from ..validators.cache_key_validator import validate_key, validate_name
from .cache_registry import CacheRegistry, get_default_registry

logger = logging.getLogger(__name__)


class LayeredCache:
    """Layered cache.

    Reads go to level 1 first and fall back to level 2, copying level 2
    hits into level 1. Writes and clears go to level 2 first, so a value
    only lands in level 1 once every process sharing level 2 can see it.

    ``get_or_create`` nests the tiers' own single-flight guarantees: a
    level 1 miss runs at most one level 2 ``get_or_create`` per process,
    and level 2 runs the producer at most once across the processes that
    share it (when level 2 coordinates across processes).
    """

    def __init__(self, name: str, level1: Cache, level2: Cache):
        """Create a layered cache from two tier instances.

        Args:
            name: Name of the layered cache
            level1: First tier to check (e.g. in-memory cache)
            level2: Fallback tier (e.g. distributed cache)

        Raises:
            ConfigurationError: If a tier is missing or both tiers are
                the same cache
        """
        self._name = validate_name(name)

        if level1 is None:
            raise ConfigurationError(f"level1 must not be None for layered cache '{name}'", {"tier": "level1"})

        if level2 is None:
            raise ConfigurationError(f"level2 must not be None for layered cache '{name}'", {"tier": "level2"})

        if level1 is level2 or level1.name == level2.name:
            raise ConfigurationError(
                f"level2 must not be the same as level1, received level1={level1.name} and level2={level2.name}",
                {"level1": level1.name, "level2": level2.name}
            )

        self._level1 = level1
        self._level2 = level2
        self._policy = LayeredCachePolicy(
            level1_cache_name=level1.name,
            level2_cache_name=level2.name
        )

    @classmethod
    def from_names(
        cls,
        name: str,
        level1_cache_name: str,
        level2_cache_name: str,
        registry: Optional[CacheRegistry] = None,
        sync_provider: Optional[str] = None
    ) -> "LayeredCache":
        """Create a layered cache over tiers registered in a registry.

        Args:
            name: Name of the layered cache
            level1_cache_name: Registered name of the first tier
            level2_cache_name: Registered name of the fallback tier
            registry: Registry to resolve tiers from, defaults to the
                process-wide registry
            sync_provider: Notification provider recorded in the policy

        Raises:
            ConfigurationError: If a tier is not registered or both names
                resolve to the same cache
        """
        if registry is None:
            registry = get_default_registry()

        level1 = cls._resolve_tier(registry, "level1CacheName", level1_cache_name)
        level2 = cls._resolve_tier(registry, "level2CacheName", level2_cache_name)

        if level1 is level2 or level1.name == level2.name:
            raise ConfigurationError(
                f"level2 must not be the same as level1, received level1CacheName={level1_cache_name}, "
                f"level2CacheName={level2_cache_name}, which map to {level1.name} and {level2.name}",
                {"level1": level1.name, "level2": level2.name}
            )

        layered = cls(name, level1, level2)
        layered._policy = LayeredCachePolicy(
            level1_cache_name=level1_cache_name,
            level2_cache_name=level2_cache_name,
            sync_provider=sync_provider
        )
        return layered

    @classmethod
    def from_policy(
        cls,
        name: str,
        policy: LayeredCachePolicy,
        registry: Optional[CacheRegistry] = None
    ) -> "LayeredCache":
        """Create a layered cache from a policy (synchronization not attached)."""
        if policy is None:
            raise ConfigurationError(f"policy must not be None for layered cache '{name}'")

        return cls.from_names(
            name,
            policy.level1_cache_name,
            policy.level2_cache_name,
            registry=registry,
            sync_provider=policy.sync_provider
        )

    @staticmethod
    def _resolve_tier(registry: CacheRegistry, label: str, tier_name: Optional[str]) -> Cache:
        if tier_name is None:
            raise ConfigurationError(f"Cache is not registered: {label}=None", {"tier": label})

        tier = registry.resolve(tier_name)
        if tier is None:
            raise ConfigurationError(f"Cache is not registered: {label}={tier_name}", {"tier": label})
        return tier

    @property
    def name(self) -> str:
        """Cache name."""
        return self._name

    @property
    def level1(self) -> Cache:
        """First, local tier."""
        return self._level1

    @property
    def level2(self) -> Cache:
        """Fallback, shared tier."""
        return self._level2

    @property
    def policy(self) -> LayeredCachePolicy:
        """Policy naming the tiers of this cache."""
        return self._policy

    def try_get(self, key: str) -> Tuple[bool, Any]:
        """Look up key in level 1, then level 2 (repairing level 1 on a hit)."""
        validate_key(key)

        hit, value = self._level1.try_get(key)
        if hit:
            return True, value

        hit, value = self._level2.try_get(key)
        if hit:
            self._level1.set(key, value)
            return True, value

        return False, None

    def set(self, key: str, value: Any) -> None:
        """Store value in level 2, then level 1."""
        validate_key(key)

        self._level2.set(key, value)
        self._level1.set(key, value)

    def get_or_create(self, key: str, producer: Callable[[], Any]) -> Any:
        """Get value through level 1, falling back to level 2, then producer."""
        validate_key(key)

        return self._level1.get_or_create(key, lambda: self._level2.get_or_create(key, producer))

    def clear(self, key: str) -> None:
        """Remove key from level 2, then level 1."""
        validate_key(key)

        self._level2.clear(key)
        self._level1.clear(key)

    def clear_all(self) -> None:
        """Remove every entry from level 2, then level 1."""
        self._level2.clear_all()
        self._level1.clear_all()

    def invalidate_local(self, key: str) -> None:
        """Remove key from level 1 only."""
        validate_key(key)
        self._level1.clear(key)

    def invalidate_local_all(self) -> None:
        """Remove every entry from level 1 only."""
        self._level1.clear_all()

    def __repr__(self) -> str:
        return f"LayeredCache(name={self._name!r}, level1={self._level1.name!r}, level2={self._level2.name!r})"


def create_layered_cache(
    name: str,
    policy: LayeredCachePolicy,
    registry: Optional[CacheRegistry] = None,
    topic_prefix: Optional[str] = None
) -> Cache:
    """Create a layered cache, synchronized when its policy asks for it.

    Args:
        name: Name of the layered cache
        policy: Tier names and optional notification provider
        registry: Registry to resolve tiers and providers from, defaults
            to the process-wide registry
        topic_prefix: Invalidation topic prefix, the synchronizer default
            when omitted

    Returns:
        A LayeredCache, wrapped in a SynchronizedCache when
        ``policy.sync_provider`` is set

    Raises:
        ConfigurationError: If the tiers cannot be resolved
        SynchronizationError: If the provider is unknown or the
            subscription cannot be established
    """
    from .cache_synchronizer import SynchronizedCache

    if registry is None:
        registry = get_default_registry()
    layered = LayeredCache.from_policy(name, policy, registry)

    if not policy.sync_provider:
        return layered

    channel = registry.get_notifier_for_cache(name, policy.sync_provider)
    if channel is None:
        raise SynchronizationError(
            f"Notification provider '{policy.sync_provider}' is not registered",
            cache_name=name
        )

    logger.info(f"Synchronizing layered cache {name} through provider {policy.sync_provider}")
    if topic_prefix:
        return SynchronizedCache(layered, channel, topic_prefix=topic_prefix)
    return SynchronizedCache(layered, channel)
