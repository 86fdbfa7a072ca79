"""Cache serializers."""

from typing import Optional

from ...core.exceptions.cache import ConfigurationError
from ...core.protocols.cache_serializer import CacheSerializer
from .pickle_serializer import PickleCacheSerializer
from .json_serializer import JSONCacheSerializer


def create_serializer(serializer_type: Optional[str] = None) -> CacheSerializer:
    """Create a serializer by format name ("pickle" or "json")."""
    serializer_type = (serializer_type or "pickle").lower()
    
    if serializer_type == "pickle":
        return PickleCacheSerializer()
    if serializer_type == "json":
        return JSONCacheSerializer()
    
    raise ConfigurationError(f"Unsupported serializer type: {serializer_type}", {"serializer": serializer_type})


__all__ = [
    "PickleCacheSerializer",
    "JSONCacheSerializer",
    "create_serializer",
]
