"""In-memory notification channel.

ONLY in-process distribution - delivers invalidation events to every
subscriber of a topic within the current process. Used by tests and to
wire several synchronizers together without a broker.
"""

import itertools
import logging
import threading
from typing import Dict, List, Tuple

from ...core.events.cache_invalidated import InvalidationEvent
from ...core.protocols.notification_channel import EventHandler

logger = logging.getLogger(__name__)


class InMemoryNotificationChannel:
    """Synchronous in-process pub/sub.

    ``publish`` calls every handler of the topic on the publishing thread,
    each with its own copy of the event. A failing handler is logged and
    does not stop delivery to the others.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._handlers: Dict[str, Dict[int, EventHandler]] = {}
        self._ids = itertools.count(1)
        self._closed = False

    def publish(self, topic: str, event: InvalidationEvent) -> None:
        """Deliver event to the current subscribers of topic."""
        with self._lock:
            if self._closed:
                raise RuntimeError("Notification channel is closed")
            handlers = list(self._handlers.get(topic, {}).values())

        for handler in handlers:
            try:
                handler(InvalidationEvent.from_dict(event.to_dict()))
            except Exception as e:
                logger.error(f"Invalidation handler failed on topic {topic}: {e}")

    def subscribe(self, topic: str, handler: EventHandler) -> Tuple[str, int]:
        """Register handler for topic.

        Returns:
            Handle to pass to ``unsubscribe``
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Notification channel is closed")
            handler_id = next(self._ids)
            self._handlers.setdefault(topic, {})[handler_id] = handler

        return topic, handler_id

    def unsubscribe(self, handle: Tuple[str, int]) -> None:
        """Remove a subscription, unknown handles are ignored."""
        topic, handler_id = handle
        with self._lock:
            handlers = self._handlers.get(topic)
            if handlers is None:
                return
            handlers.pop(handler_id, None)
            if not handlers:
                del self._handlers[topic]

    def subscriber_count(self, topic: str) -> int:
        """Get the number of handlers subscribed to topic."""
        with self._lock:
            return len(self._handlers.get(topic, {}))

    def topics(self) -> List[str]:
        """Get topics with at least one subscriber."""
        with self._lock:
            return list(self._handlers)

    def close(self) -> None:
        """Drop every subscription and reject further use."""
        with self._lock:
            self._handlers.clear()
            self._closed = True
