"""Cache invalidated event.

ONLY invalidation events - announces that a key, or a whole cache, was
cleared by one process so the others can drop their local copies.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class InvalidationEvent:
    """Cache invalidated event.
    
    A ``key`` of None means every entry of ``cache_name`` was cleared.
    ``origin_id`` identifies the publishing synchronizer so it can
    recognize and ignore its own events.
    """
    
    cache_name: str
    key: Optional[str]
    origin_id: str
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    
    def get_event_type(self) -> str:
        """Get event type identifier."""
        return "cache.cleared" if self.is_clear_all() else "cache.invalidated"
    
    def is_clear_all(self) -> bool:
        """Check if the event clears the whole cache."""
        return self.key is None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_type": self.get_event_type(),
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "cache_name": self.cache_name,
            "key": self.key,
            "origin_id": self.origin_id,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InvalidationEvent":
        """Create event from dictionary."""
        timestamp = data.get("timestamp")
        return cls(
            cache_name=data["cache_name"],
            key=data.get("key"),
            origin_id=data["origin_id"],
            event_id=data.get("event_id") or str(uuid.uuid4()),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(timezone.utc)
        )
    
    def to_json(self) -> str:
        """Serialize event to JSON."""
        return json.dumps(self.to_dict())
    
    @classmethod
    def from_json(cls, payload) -> "InvalidationEvent":
        """Deserialize event from JSON text or bytes."""
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        return cls.from_dict(json.loads(payload))
