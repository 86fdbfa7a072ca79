"""Declarative cache configuration."""

from .cache_manifest import (
    CacheAction,
    CacheType,
    NotificationType,
    CacheConfigItem,
    NotificationConfigItem,
    CacheManifest,
    ManifestApplier,
    apply_manifest,
    initialize_from_config,
)

__all__ = [
    "CacheAction",
    "CacheType",
    "NotificationType",
    "CacheConfigItem",
    "NotificationConfigItem",
    "CacheManifest",
    "ManifestApplier",
    "apply_manifest",
    "initialize_from_config",
]
