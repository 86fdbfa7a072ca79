"""Cache value objects.

Immutable values - one value object per file.
"""

from .cache_name import CacheName, WILDCARD, score
from .layered_cache_policy import LayeredCachePolicy

__all__ = [
    "CacheName",
    "WILDCARD",
    "score",
    "LayeredCachePolicy",
]
