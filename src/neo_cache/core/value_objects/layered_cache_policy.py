"""Layered cache policy value object.

ONLY layering configuration - names the two tiers of a layered cache and
the notification provider used to keep the first tier coherent.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LayeredCachePolicy:
    """Layered cache policy.
    
    Attributes:
        level1_cache_name: Registry pattern of the fast, local tier
        level2_cache_name: Registry pattern of the shared, authoritative tier
        sync_provider: Name of the notification provider to synchronize
            the local tier with, or None to run unsynchronized
    """
    
    level1_cache_name: str
    level2_cache_name: str
    sync_provider: Optional[str] = None
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayeredCachePolicy":
        """Create policy from a manifest dictionary."""
        return cls(
            level1_cache_name=data.get("level1_cache_name"),
            level2_cache_name=data.get("level2_cache_name"),
            sync_provider=data.get("sync_provider")
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert policy to dictionary."""
        return {
            "level1_cache_name": self.level1_cache_name,
            "level2_cache_name": self.level2_cache_name,
            "sync_provider": self.sync_provider,
        }
