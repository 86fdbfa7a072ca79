"""Cache application services."""

from .cache_registry import (
    CacheRegistry,
    create_cache_registry,
    get_default_registry,
    reset_default_registry,
)
from .layered_cache import LayeredCache, create_layered_cache
from .cache_synchronizer import (
    InvalidationSynchronizer,
    SynchronizedCache,
    SynchronizerState,
    create_synchronized_cache,
)

__all__ = [
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
]
