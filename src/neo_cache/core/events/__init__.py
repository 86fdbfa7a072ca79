"""Cache domain events."""

from .cache_invalidated import InvalidationEvent

__all__ = [
    "InvalidationEvent",
]
