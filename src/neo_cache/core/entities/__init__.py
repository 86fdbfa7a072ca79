"""Cache domain entities."""

from .registered_cache import RegisteredCache

__all__ = [
    "RegisteredCache",
]
