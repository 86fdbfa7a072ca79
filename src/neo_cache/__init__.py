"""neo-cache - named, layered caches with cross-process invalidation.

Caches are registered under dotted name patterns in a CacheRegistry and
resolved by name. A LayeredCache puts a process-local tier in front of a
shared tier; wrapping it in a SynchronizedCache keeps the local tiers of
every process in step through a notification channel.
"""

from .__version__ import __version__

from .core.exceptions import (
    NeoCacheError,
    InvalidArgumentError,
    ConfigurationError,
    TypeMismatchError,
    SynchronizationError,
    ProducerFailure,
    CacheBackendError,
    SerializationError,
)
from .core.value_objects import CacheName, LayeredCachePolicy, WILDCARD, score
from .core.events import InvalidationEvent
from .core.protocols import Cache, NotificationChannel, CacheSerializer
from .application.services import (
    CacheRegistry,
    create_cache_registry,
    get_default_registry,
    reset_default_registry,
    LayeredCache,
    create_layered_cache,
    InvalidationSynchronizer,
    SynchronizedCache,
    SynchronizerState,
    create_synchronized_cache,
)
from .infrastructure.repositories import MemoryCache, NoCache, RedisCache
from .infrastructure.distributors import InMemoryNotificationChannel, RedisNotificationChannel
from .infrastructure.configuration import CacheManifest, apply_manifest, initialize_from_config
from .config import CacheSettings, get_cache_settings, setup_logging

__all__ = [
    "__version__",
    # Exceptions
    "NeoCacheError",
    "InvalidArgumentError",
    "ConfigurationError",
    "TypeMismatchError",
    "SynchronizationError",
    "ProducerFailure",
    "CacheBackendError",
    "SerializationError",
    # Domain
    "CacheName",
    "LayeredCachePolicy",
    "WILDCARD",
    "score",
    "InvalidationEvent",
    "Cache",
    "NotificationChannel",
    "CacheSerializer",
    # Services
    "CacheRegistry",
    "create_cache_registry",
    "get_default_registry",
    "reset_default_registry",
    "LayeredCache",
    "create_layered_cache",
    "InvalidationSynchronizer",
    "SynchronizedCache",
    "SynchronizerState",
    "create_synchronized_cache",
    # Adapters
    "MemoryCache",
    "NoCache",
    "RedisCache",
    "InMemoryNotificationChannel",
    "RedisNotificationChannel",
    # Configuration
    "CacheManifest",
    "apply_manifest",
    "initialize_from_config",
    "CacheSettings",
    "get_cache_settings",
    "setup_logging",
]
