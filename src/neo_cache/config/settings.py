"""Environment settings for neo-cache."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ..core.exceptions.cache import ConfigurationError

ENV_PREFIX = "NEO_CACHE_"


class CacheSettings(BaseModel):
    """Process-wide cache settings."""

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL for redis tiers and channels")
    key_prefix: str = Field(default="neo:cache:", description="Prefix of every Redis cache key")
    channel_prefix: str = Field(default="neo:cache:invalidations", description="Prefix of invalidation topics")

    # Behaviour
    default_ttl_seconds: Optional[int] = Field(default=None, ge=1, description="Default entry lifetime, None keeps entries")
    lock_timeout_seconds: float = Field(default=30.0, gt=0, description="Lifetime of a producer lock")
    lock_blocking_timeout_seconds: float = Field(default=10.0, ge=0, description="Wait for another producer")
    serializer: str = Field(default="pickle", pattern="^(pickle|json)$", description="Redis value serializer")

    # Manifest
    manifest_path: Optional[str] = Field(default=None, description="Cache manifest loaded at startup")


def _getenv(name: str) -> Optional[str]:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    return value if value not in (None, "") else None


def load_cache_settings() -> CacheSettings:
    """Load settings from ``NEO_CACHE_*`` environment variables.

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    values = {
        "redis_url": _getenv("REDIS_URL"),
        "key_prefix": _getenv("KEY_PREFIX"),
        "channel_prefix": _getenv("CHANNEL_PREFIX"),
        "default_ttl_seconds": _getenv("DEFAULT_TTL_SECONDS"),
        "lock_timeout_seconds": _getenv("LOCK_TIMEOUT_SECONDS"),
        "lock_blocking_timeout_seconds": _getenv("LOCK_BLOCKING_TIMEOUT_SECONDS"),
        "serializer": _getenv("SERIALIZER"),
        "manifest_path": _getenv("MANIFEST_PATH"),
    }

    try:
        return CacheSettings(**{key: value for key, value in values.items() if value is not None})
    except ValidationError as e:
        raise ConfigurationError(f"Failed to load cache settings: {e}") from e


@lru_cache(maxsize=1)
def get_cache_settings() -> CacheSettings:
    """Get cached settings from the environment."""
    return load_cache_settings()
