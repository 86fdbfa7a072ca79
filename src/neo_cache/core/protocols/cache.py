"""Cache protocol.

ONLY cache contract - defines the capability every storage tier, every
composite cache and every cache decorator implements.
"""

from typing import Any, Callable, Optional, Tuple, TypeVar
from typing_extensions import Protocol, runtime_checkable

from ..exceptions.cache import TypeMismatchError

T = TypeVar("T")


@runtime_checkable
class Cache(Protocol):
    """Cache protocol.
    
    Keys are strings, values are opaque. A cache is identified by its
    ``name``, which is also used to tell two tiers apart.
    """
    
    @property
    def name(self) -> str:
        """Cache name."""
        ...
    
    def try_get(self, key: str) -> Tuple[bool, Any]:
        """Look up a value without computing it.
        
        Args:
            key: Cache key
            
        Returns:
            Tuple of (hit, value); value is None on a miss
        """
        ...
    
    def set(self, key: str, value: Any) -> None:
        """Store a value under key."""
        ...
    
    def get_or_create(self, key: str, producer: Callable[[], Any]) -> Any:
        """Get cached value or compute, store and return it.
        
        Concurrent callers for the same missing key share a single
        invocation of ``producer``.
        
        Args:
            key: Cache key
            producer: Zero-argument function computing the value
            
        Returns:
            Cached or computed value
        """
        ...
    
    def clear(self, key: str) -> None:
        """Remove the entry stored under key, if any."""
        ...
    
    def clear_all(self) -> None:
        """Remove every entry of this cache."""
        ...


def as_capability(cache: Optional[Cache], capability: type, name: Optional[str] = None):
    """Narrow a cache to a richer capability.
    
    Decorators exposing an ``inner`` cache are unwrapped until a cache
    providing the capability is found.
    
    Args:
        cache: Cache to narrow, None passes through
        capability: Class or runtime-checkable protocol to narrow to
        name: Name used in the error message, defaults to the cache name
        
    Returns:
        The cache (or the wrapped cache) providing the capability
        
    Raises:
        TypeMismatchError: If neither the cache nor any wrapped cache
            provides the capability
    """
    if cache is None:
        return None
    
    candidate = cache
    while candidate is not None:
        if isinstance(candidate, capability):
            return candidate
        candidate = getattr(candidate, "inner", None)
    
    raise TypeMismatchError(name or cache.name, capability, cache)
