"""Cache validators."""

from .cache_key_validator import CacheKeyValidator, validate_key, validate_name

__all__ = [
    "CacheKeyValidator",
    "validate_key",
    "validate_name",
]
