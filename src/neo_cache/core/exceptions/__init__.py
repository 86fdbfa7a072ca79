"""Exceptions module for neo-cache.

This module provides the complete exception hierarchy for neo-cache.
"""

from .base import (
    NeoCacheError,
    create_error_response,
)

from .cache import (
    InvalidArgumentError,
    ConfigurationError,
    TypeMismatchError,
    SynchronizationError,
    ProducerFailure,
    CacheBackendError,
    SerializationError,
)

__all__ = [
    "NeoCacheError",
    "create_error_response",
    "InvalidArgumentError",
    "ConfigurationError",
    "TypeMismatchError",
    "SynchronizationError",
    "ProducerFailure",
    "CacheBackendError",
    "SerializationError",
]
