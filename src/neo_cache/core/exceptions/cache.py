"""Cache exceptions for neo-cache.

This module defines the errors raised by the registry, the layered cache,
the invalidation synchronizer and the storage tiers.
"""

from typing import Any, Dict, Optional

from .base import NeoCacheError


class InvalidArgumentError(NeoCacheError, ValueError):
    """Raised when a cache name, pattern or key is missing or malformed."""
    
    def __init__(self, argument: str, reason: str = "must not be None"):
        super().__init__(
            f"Invalid argument '{argument}': {reason}",
            error_code="INVALID_ARGUMENT",
            details={"argument": argument, "reason": reason}
        )
        self.argument = argument


class ConfigurationError(NeoCacheError):
    """Raised when a cache or a manifest is misconfigured.
    
    Covers missing tiers, layered caches over themselves and invalid
    manifest entries. Always raised at construction time.
    """
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CACHE_CONFIGURATION_ERROR", details=details)


class TypeMismatchError(NeoCacheError, TypeError):
    """Raised when a resolved cache does not provide the requested capability."""
    
    def __init__(self, cache_name: str, expected: type, actual: Any):
        expected_name = getattr(expected, "__name__", str(expected))
        super().__init__(
            f"The specified cache '{cache_name}' is not of type {expected_name}",
            error_code="CACHE_TYPE_MISMATCH",
            details={
                "cache_name": cache_name,
                "expected": expected_name,
                "actual": type(actual).__name__,
            }
        )
        self.expected = expected


class SynchronizationError(NeoCacheError):
    """Raised when invalidation events cannot be subscribed to or published."""
    
    def __init__(self, message: str, cache_name: Optional[str] = None):
        super().__init__(
            message,
            error_code="CACHE_SYNCHRONIZATION_ERROR",
            details={"cache_name": cache_name} if cache_name else None
        )
        self.cache_name = cache_name


class ProducerFailure(NeoCacheError):
    """Raised to every waiter when a get-or-create producer fails.
    
    The producer's exception is available as ``__cause__``.
    """
    
    def __init__(self, cache_name: str, key: str, cause: BaseException):
        super().__init__(
            f"Value producer failed for key '{key}' in cache '{cache_name}': {cause}",
            error_code="CACHE_PRODUCER_FAILURE",
            details={
                "cache_name": cache_name,
                "key": key,
                "cause": type(cause).__name__,
            }
        )
        self.cache_name = cache_name
        self.key = key


class CacheBackendError(NeoCacheError):
    """Raised when a storage backend (e.g. Redis) fails an operation."""
    
    def __init__(self, cache_name: str, operation: str, cause: BaseException):
        super().__init__(
            f"Cache backend failed during {operation} on '{cache_name}': {cause}",
            error_code="CACHE_BACKEND_ERROR",
            details={"cache_name": cache_name, "operation": operation}
        )
        self.cache_name = cache_name
        self.operation = operation


class SerializationError(NeoCacheError):
    """Raised when a value cannot be serialized or deserialized for storage."""
    
    def __init__(self, message: str, serializer_type: str, original_error: Optional[BaseException] = None):
        super().__init__(
            message,
            error_code="CACHE_SERIALIZATION_ERROR",
            details={
                "serializer_type": serializer_type,
                "original_error": type(original_error).__name__ if original_error else None,
            }
        )
        self.serializer_type = serializer_type
        self.original_error = original_error
