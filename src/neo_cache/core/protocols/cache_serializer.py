"""Cache serializer protocol.

ONLY serialization contract - converts cache values to bytes and back for
tiers that store values outside the process.
"""

from typing import Any
from typing_extensions import Protocol, runtime_checkable


@runtime_checkable
class CacheSerializer(Protocol):
    """Cache serializer protocol."""
    
    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes."""
        ...
    
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value."""
        ...
    
    def get_format_name(self) -> str:
        """Get serialization format name."""
        ...
