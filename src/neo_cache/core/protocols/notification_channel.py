"""Notification channel protocol.

ONLY transport contract - publish/subscribe channel carrying invalidation
events between processes sharing a remote cache tier.
"""

from typing import Any, Callable
from typing_extensions import Protocol, runtime_checkable

from ..events.cache_invalidated import InvalidationEvent

EventHandler = Callable[[InvalidationEvent], None]


@runtime_checkable
class NotificationChannel(Protocol):
    """Notification channel protocol.
    
    Delivery ordering and guarantees belong to the channel. Consumers
    tolerate duplicates and only need deliveries to arrive eventually.
    """
    
    def publish(self, topic: str, event: InvalidationEvent) -> None:
        """Publish event to every subscriber of topic."""
        ...
    
    def subscribe(self, topic: str, handler: EventHandler) -> Any:
        """Subscribe handler to topic.
        
        Returns:
            Opaque subscription handle for ``unsubscribe``
        """
        ...
    
    def unsubscribe(self, handle: Any) -> None:
        """Cancel a subscription."""
        ...
