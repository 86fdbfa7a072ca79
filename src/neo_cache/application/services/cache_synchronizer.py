"""Cache synchronization service.

ONLY invalidation synchronization - publishes this process's cache
mutations to a notification channel and applies other processes'
invalidations to the local tier.
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from ...core.events.cache_invalidated import InvalidationEvent
from ...core.exceptions.cache import SynchronizationError
from ...core.protocols.cache import Cache
from ...core.protocols.notification_channel import NotificationChannel
from ...utils.node_id import generate_node_id
from ..validators.cache_key_validator import validate_key
from .layered_cache import LayeredCache

logger = logging.getLogger(__name__)

DEFAULT_TOPIC_PREFIX = "neo:cache:invalidations"


class SynchronizerState(Enum):
    """Lifecycle states of a synchronizer."""
    DETACHED = "detached"
    SUBSCRIBING = "subscribing"
    ACTIVE = "active"


class InvalidationSynchronizer:
    """Invalidation synchronizer for one cache.

    Publisher: ``publish_set``, ``publish_clear`` and ``publish_clear_all``
    announce local mutations, tagged with this synchronizer's origin id.

    Subscriber: events from other origins for the same cache clear the
    local tier only. For a LayeredCache that is level 1; level 2 is the
    shared tier and already reflects the change. Events carrying this
    synchronizer's own origin id are ignored, as is anything received
    before the subscription is active.
    """

    def __init__(
        self,
        target: Cache,
        channel: NotificationChannel,
        origin_id: Optional[str] = None,
        topic_prefix: str = DEFAULT_TOPIC_PREFIX
    ):
        """Initialize a detached synchronizer.

        Args:
            target: Cache kept in sync
            channel: Notification channel shared with the other processes
            origin_id: Identifier of this process instance, generated
                when omitted
            topic_prefix: Prefix of the channel topic, the cache name is
                appended
        """
        self._target = target
        self._channel = channel
        self._origin_id = origin_id or generate_node_id()
        self._topic = f"{topic_prefix}:{target.name}"
        self._state = SynchronizerState.DETACHED
        self._subscription: Any = None
        self._lock = threading.Lock()

    @property
    def state(self) -> SynchronizerState:
        """Current lifecycle state."""
        return self._state

    @property
    def origin_id(self) -> str:
        """Identifier stamped on published events."""
        return self._origin_id

    @property
    def topic(self) -> str:
        """Channel topic for this cache."""
        return self._topic

    @property
    def is_active(self) -> bool:
        """Check if events are being published and applied."""
        return self._state == SynchronizerState.ACTIVE

    # Lifecycle

    def attach(self) -> None:
        """Subscribe to the channel.

        Raises:
            SynchronizationError: If the subscription cannot be established
        """
        with self._lock:
            if self._state != SynchronizerState.DETACHED:
                return

            self._state = SynchronizerState.SUBSCRIBING
            try:
                self._subscription = self._channel.subscribe(self._topic, self.handle_event)
            except Exception as e:
                self._state = SynchronizerState.DETACHED
                logger.error(f"Failed to subscribe cache {self._target.name} to {self._topic}: {e}")
                raise SynchronizationError(
                    f"Failed to subscribe to invalidations for cache '{self._target.name}': {e}",
                    cache_name=self._target.name
                ) from e

            self._state = SynchronizerState.ACTIVE

        logger.info(f"Cache synchronizer active: cache={self._target.name}, topic={self._topic}, origin={self._origin_id}")

    def detach(self) -> None:
        """Cancel the subscription."""
        with self._lock:
            if self._state == SynchronizerState.DETACHED:
                return

            subscription, self._subscription = self._subscription, None
            self._state = SynchronizerState.DETACHED

        try:
            self._channel.unsubscribe(subscription)
        except Exception as e:
            logger.warning(f"Failed to unsubscribe cache {self._target.name} from {self._topic}: {e}")

        logger.info(f"Cache synchronizer detached: cache={self._target.name}")

    # Publisher

    def publish_set(self, key: str) -> None:
        """Announce that key was overwritten locally."""
        self._publish(validate_key(key))

    def publish_clear(self, key: str) -> None:
        """Announce that key was cleared locally."""
        self._publish(validate_key(key))

    def publish_clear_all(self) -> None:
        """Announce that the whole cache was cleared locally."""
        self._publish(None)

    def _publish(self, key: Optional[str]) -> None:
        if not self.is_active:
            raise SynchronizationError(
                f"Synchronizer for cache '{self._target.name}' is not active ({self._state.value})",
                cache_name=self._target.name
            )

        event = InvalidationEvent(cache_name=self._target.name, key=key, origin_id=self._origin_id)

        try:
            self._channel.publish(self._topic, event)
        except Exception as e:
            logger.error(f"Failed to publish invalidation for cache {self._target.name}, key={key}: {e}")
            raise SynchronizationError(
                f"Failed to publish invalidation for cache '{self._target.name}': {e}",
                cache_name=self._target.name
            ) from e

        logger.debug(f"Published invalidation: cache={self._target.name}, key={key}")

    # Subscriber

    def handle_event(self, event: InvalidationEvent) -> None:
        """Apply an invalidation received from the channel."""
        if not self.is_active:
            logger.debug(f"Dropping invalidation received while {self._state.value}: cache={event.cache_name}")
            return

        if event.origin_id == self._origin_id:
            return

        if event.cache_name != self._target.name:
            return

        try:
            if event.is_clear_all():
                self._clear_local_all()
            else:
                self._clear_local(event.key)
        except Exception as e:
            logger.error(f"Failed to apply invalidation for cache {event.cache_name}, key={event.key}: {e}")
            return

        logger.debug(f"Applied invalidation: cache={event.cache_name}, key={event.key}, origin={event.origin_id}")

    def _clear_local(self, key: str) -> None:
        if isinstance(self._target, LayeredCache):
            self._target.invalidate_local(key)
        else:
            self._target.clear(key)

    def _clear_local_all(self) -> None:
        if isinstance(self._target, LayeredCache):
            self._target.invalidate_local_all()
        else:
            self._target.clear_all()


class SynchronizedCache:
    """Cache decorator publishing mutations of the wrapped cache.

    ``set``, ``clear`` and ``clear_all`` run on the wrapped cache and are
    then announced through an attached InvalidationSynchronizer. Reads
    pass straight through.
    """

    def __init__(
        self,
        inner: Cache,
        channel: NotificationChannel,
        origin_id: Optional[str] = None,
        topic_prefix: str = DEFAULT_TOPIC_PREFIX
    ):
        """Wrap a cache and attach its synchronizer.

        Raises:
            SynchronizationError: If the subscription cannot be established
        """
        self._inner = inner
        self._synchronizer = InvalidationSynchronizer(
            inner,
            channel,
            origin_id=origin_id,
            topic_prefix=topic_prefix
        )
        self._synchronizer.attach()

    @property
    def name(self) -> str:
        """Cache name."""
        return self._inner.name

    @property
    def inner(self) -> Cache:
        """Wrapped cache."""
        return self._inner

    @property
    def synchronizer(self) -> InvalidationSynchronizer:
        """Synchronizer attached to the wrapped cache."""
        return self._synchronizer

    def try_get(self, key: str) -> Tuple[bool, Any]:
        return self._inner.try_get(key)

    def get_or_create(self, key: str, producer: Callable[[], Any]) -> Any:
        return self._inner.get_or_create(key, producer)

    def set(self, key: str, value: Any) -> None:
        self._inner.set(key, value)
        self._synchronizer.publish_set(key)

    def clear(self, key: str) -> None:
        self._inner.clear(key)
        self._synchronizer.publish_clear(key)

    def clear_all(self) -> None:
        self._inner.clear_all()
        self._synchronizer.publish_clear_all()

    def close(self) -> None:
        """Detach the synchronizer."""
        self._synchronizer.detach()

    def __repr__(self) -> str:
        return f"SynchronizedCache(inner={self._inner!r}, origin={self._synchronizer.origin_id!r})"


def create_synchronized_cache(
    inner: Cache,
    channel: NotificationChannel,
    origin_id: Optional[str] = None
) -> SynchronizedCache:
    """Factory function to wrap a cache with invalidation synchronization."""
    return SynchronizedCache(inner, channel, origin_id=origin_id)
