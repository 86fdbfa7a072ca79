"""Cache name value object.

ONLY name matching - immutable cache name pattern with an optional
trailing wildcard, scored against lookup names by literal prefix length.
"""

from dataclasses import dataclass, field

WILDCARD = "*"


def score(pattern: str, name: str) -> int:
    """Score how specifically ``pattern`` matches ``name``.
    
    Exact patterns score their full length when equal to the name.
    Wildcard patterns (ending with ``*``) score the length of their
    literal prefix when the name starts with it. Anything else scores 0.
    
    Args:
        pattern: Registered cache name pattern
        name: Requested cache name
        
    Returns:
        Non-negative match score, longer literal prefixes score higher
    """
    if pattern.endswith(WILDCARD):
        prefix = pattern[:-len(WILDCARD)]
        return len(prefix) if name.startswith(prefix) else 0
    
    return len(pattern) if pattern == name else 0


@dataclass(frozen=True)
class CacheName:
    """Cache name pattern value object.
    
    Two patterns are equal when their text is equal (case-sensitive).
    A pattern ending with ``*`` matches every name starting with its
    literal prefix, e.g. ``orders.*`` covers ``orders.daily``.
    """
    
    value: str
    prefix: str = field(init=False, compare=False)
    has_wildcard: bool = field(init=False, compare=False)
    
    def __post_init__(self):
        """Split pattern into literal prefix and wildcard flag."""
        if self.value is None:
            raise ValueError("Cache name cannot be None")
        
        has_wildcard = self.value.endswith(WILDCARD)
        prefix = self.value[:-len(WILDCARD)] if has_wildcard else self.value
        
        object.__setattr__(self, "has_wildcard", has_wildcard)
        object.__setattr__(self, "prefix", prefix)
    
    def matches(self, name: str) -> bool:
        """Check if this pattern covers the given name."""
        if self.has_wildcard:
            return name.startswith(self.prefix)
        return name == self.value
    
    def get_match_level(self, name: str) -> int:
        """Get match score of this pattern for the given name."""
        return score(self.value, name)
    
    def __str__(self) -> str:
        """String representation."""
        return self.value
