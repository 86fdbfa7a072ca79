"""Notification channels carrying invalidation events between processes."""

from .memory_channel import InMemoryNotificationChannel
from .redis_channel import RedisNotificationChannel, create_redis_channel

__all__ = [
    "InMemoryNotificationChannel",
    "RedisNotificationChannel",
    "create_redis_channel",
]
