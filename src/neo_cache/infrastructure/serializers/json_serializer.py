"""JSON cache serializer.

ONLY JSON serialization - implements JSON serialization for cache values
with type preservation for common Python types.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID

from ...core.exceptions.cache import SerializationError


class CustomJSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for extended type support."""
    
    def default(self, obj: Any) -> Any:
        """Handle non-standard JSON types."""
        if isinstance(obj, datetime):
            return {"__datetime__": obj.isoformat()}
        elif isinstance(obj, date):
            return {"__date__": obj.isoformat()}
        elif isinstance(obj, Decimal):
            return {"__decimal__": str(obj)}
        elif isinstance(obj, UUID):
            return {"__uuid__": str(obj)}
        elif isinstance(obj, (set, frozenset)):
            return {"__set__": list(obj)}
        elif isinstance(obj, bytes):
            return {"__bytes__": obj.hex()}
        
        return super().default(obj)


def decode_json_object(obj: Dict[str, Any]) -> Any:
    """Decode custom JSON objects back to Python types."""
    if "__datetime__" in obj:
        return datetime.fromisoformat(obj["__datetime__"])
    elif "__date__" in obj:
        return date.fromisoformat(obj["__date__"])
    elif "__decimal__" in obj:
        return Decimal(obj["__decimal__"])
    elif "__uuid__" in obj:
        return UUID(obj["__uuid__"])
    elif "__set__" in obj:
        return set(obj["__set__"])
    elif "__bytes__" in obj:
        return bytes.fromhex(obj["__bytes__"])
    
    return obj


class JSONCacheSerializer:
    """JSON cache serializer.
    
    Safe to use with untrusted stores. Tuples come back as lists and
    unsupported types raise SerializationError.
    """
    
    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = False):
        self._ensure_ascii = ensure_ascii
        self._sort_keys = sort_keys
    
    def serialize(self, value: Any) -> bytes:
        """Serialize value to UTF-8 JSON bytes."""
        try:
            text = json.dumps(
                value,
                cls=CustomJSONEncoder,
                ensure_ascii=self._ensure_ascii,
                sort_keys=self._sort_keys,
                separators=(",", ":")
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"JSON serialization failed: {e}", "json", e) from e
        return text.encode("utf-8")
    
    def deserialize(self, data: bytes) -> Any:
        """Deserialize UTF-8 JSON bytes."""
        try:
            return json.loads(data.decode("utf-8"), object_hook=decode_json_object)
        except (UnicodeDecodeError, ValueError) as e:
            raise SerializationError(f"JSON deserialization failed: {e}", "json", e) from e
    
    def get_format_name(self) -> str:
        """Get serialization format name."""
        return "json"
