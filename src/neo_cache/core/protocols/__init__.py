"""Cache protocols.

Contracts consumed and implemented by the cache core.
"""

from .cache import Cache, as_capability
from .notification_channel import NotificationChannel, EventHandler
from .cache_serializer import CacheSerializer

__all__ = [
    "Cache",
    "as_capability",
    "NotificationChannel",
    "EventHandler",
    "CacheSerializer",
]
