"""Registered cache entity.

ONLY registry rows - pairs a cache name pattern with the cache it resolves to.
"""

from dataclasses import dataclass
from typing import Any

from ..value_objects.cache_name import CacheName


@dataclass(frozen=True)
class RegisteredCache:
    """Registry row binding a name pattern to a cache instance."""
    
    pattern: CacheName
    cache: Any
    
    def score(self, name: str) -> int:
        """Get match score of this row for the given name."""
        return self.pattern.get_match_level(name)
    
    def covers(self, name: str) -> bool:
        """Check if this row's pattern actually covers the given name."""
        return self.pattern.matches(name) and self.score(name) >= len(self.pattern.prefix)
