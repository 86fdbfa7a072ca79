"""Pickle cache serializer.

ONLY pickle serialization - implements pickle serialization for cache values
with protocol version control and optional compression.
"""

import gzip
import pickle
from dataclasses import dataclass
from typing import Any

from ...core.exceptions.cache import SerializationError

COMPRESSION_MARKER = b"GZIP:"


@dataclass
class PickleSerializerStats:
    """Pickle serializer statistics."""
    
    serialization_count: int = 0
    deserialization_count: int = 0
    total_bytes_serialized: int = 0
    error_count: int = 0


class PickleCacheSerializer:
    """Pickle cache serializer.
    
    Supports any picklable Python object. Only use it with caches whose
    backing store is trusted: unpickling runs arbitrary code.
    """
    
    def __init__(
        self,
        protocol: int = pickle.HIGHEST_PROTOCOL,
        use_compression: bool = False,
        compression_level: int = 6,
        compression_threshold: int = 1024  # Compress if > 1KB
    ):
        """Initialize pickle serializer.
        
        Args:
            protocol: Pickle protocol version
            use_compression: Enable gzip compression
            compression_level: Gzip compression level (1-9)
            compression_threshold: Minimum size for compression
        """
        if protocol < 0 or protocol > pickle.HIGHEST_PROTOCOL:
            protocol = pickle.HIGHEST_PROTOCOL
        
        self._protocol = protocol
        self._use_compression = use_compression
        self._compression_level = max(1, min(9, compression_level))
        self._compression_threshold = max(0, compression_threshold)
        self._stats = PickleSerializerStats()
    
    def serialize(self, value: Any) -> bytes:
        """Serialize value to pickle bytes."""
        try:
            data = pickle.dumps(value, protocol=self._protocol)
        except (pickle.PickleError, TypeError, AttributeError) as e:
            self._stats.error_count += 1
            raise SerializationError(f"Pickle serialization failed: {e}", "pickle", e) from e
        
        if self._use_compression and len(data) >= self._compression_threshold:
            compressed = gzip.compress(data, compresslevel=self._compression_level)
            if len(compressed) + len(COMPRESSION_MARKER) < len(data):
                data = COMPRESSION_MARKER + compressed
        
        self._stats.serialization_count += 1
        self._stats.total_bytes_serialized += len(data)
        return data
    
    def deserialize(self, data: bytes) -> Any:
        """Deserialize pickle bytes back to Python object."""
        try:
            if data.startswith(COMPRESSION_MARKER):
                data = gzip.decompress(data[len(COMPRESSION_MARKER):])
            result = pickle.loads(data)
        except (pickle.PickleError, EOFError, AttributeError, ImportError,
                IndexError, ValueError, gzip.BadGzipFile) as e:
            self._stats.error_count += 1
            raise SerializationError(f"Pickle deserialization failed: {e}", "pickle", e) from e
        
        self._stats.deserialization_count += 1
        return result
    
    def get_format_name(self) -> str:
        """Get serialization format name."""
        return "pickle"
    
    def get_stats(self) -> PickleSerializerStats:
        """Get serializer statistics."""
        return self._stats
