"""Redis notification channel.

ONLY Redis pub/sub distribution - publishes invalidation events as JSON
messages and dispatches received messages to subscribed handlers from a
background listener thread.
"""

import itertools
import logging
import threading
from typing import Any, Dict, Optional, Tuple

import redis
from redis.exceptions import RedisError

from ...core.events.cache_invalidated import InvalidationEvent
from ...core.protocols.notification_channel import EventHandler

logger = logging.getLogger(__name__)


class RedisNotificationChannel:
    """Notification channel over Redis pub/sub.

    One pub/sub connection serves every topic of the channel. The
    listener thread starts with the first subscription and stops on
    ``close``. Handlers run on the listener thread.
    """

    def __init__(self, redis_client: redis.Redis, sleep_time: float = 0.1):
        """Initialize Redis notification channel.

        Args:
            redis_client: Synchronous Redis client
            sleep_time: Poll interval of the listener thread
        """
        self._redis = redis_client
        self._sleep_time = sleep_time
        self._pubsub: Any = None
        self._thread: Any = None
        self._handlers: Dict[str, Dict[int, EventHandler]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def is_listening(self) -> bool:
        """Check if the listener thread is running."""
        return self._thread is not None

    def publish(self, topic: str, event: InvalidationEvent) -> int:
        """Publish event to topic.

        Returns:
            Number of Redis subscribers that received the message
        """
        return self._redis.publish(topic, event.to_json())

    def subscribe(self, topic: str, handler: EventHandler) -> Tuple[str, int]:
        """Register handler for topic, subscribing on Redis if needed.

        Returns:
            Handle to pass to ``unsubscribe``

        Raises:
            RedisError: If the subscription cannot be established
        """
        with self._lock:
            if self._pubsub is None:
                self._pubsub = self._redis.pubsub(ignore_subscribe_messages=True)

            if topic not in self._handlers:
                self._pubsub.subscribe(**{topic: self._on_message})
                self._handlers[topic] = {}

            handler_id = next(self._ids)
            self._handlers[topic][handler_id] = handler

            if self._thread is None:
                self._thread = self._pubsub.run_in_thread(sleep_time=self._sleep_time, daemon=True)

        logger.debug(f"Subscribed to invalidation topic {topic}")
        return topic, handler_id

    def unsubscribe(self, handle: Tuple[str, int]) -> None:
        """Remove a subscription, unsubscribing on Redis when a topic has no handlers left."""
        topic, handler_id = handle
        with self._lock:
            handlers = self._handlers.get(topic)
            if handlers is None:
                return
            handlers.pop(handler_id, None)
            if handlers:
                return
            del self._handlers[topic]
            if self._pubsub is not None:
                self._pubsub.unsubscribe(topic)

        logger.debug(f"Unsubscribed from invalidation topic {topic}")

    def _on_message(self, message: Dict[str, Any]) -> None:
        channel = message.get("channel")
        if isinstance(channel, bytes):
            channel = channel.decode("utf-8")

        try:
            event = InvalidationEvent.from_json(message["data"])
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring malformed invalidation message on {channel}: {e}")
            return

        with self._lock:
            handlers = list(self._handlers.get(channel, {}).values())

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Invalidation handler failed on topic {channel}: {e}")

    def close(self) -> None:
        """Stop the listener thread and close the pub/sub connection."""
        with self._lock:
            thread, self._thread = self._thread, None
            pubsub, self._pubsub = self._pubsub, None
            self._handlers.clear()

        if thread is not None:
            thread.stop()
        if pubsub is not None:
            try:
                pubsub.close()
            except RedisError as e:
                logger.warning(f"Failed to close Redis pub/sub connection: {e}")


def create_redis_channel(redis_client: redis.Redis, sleep_time: Optional[float] = None) -> RedisNotificationChannel:
    """Factory function to create a Redis notification channel."""
    if sleep_time is None:
        return RedisNotificationChannel(redis_client)
    return RedisNotificationChannel(redis_client, sleep_time=sleep_time)
