"""Cache manifest.

ONLY declarative setup - describes the caches and notification providers
of a process in YAML, JSON or a dict and applies them to a registry.

Example (YAML)::

    notifications:
      - name: redis
        type: redis
        policy: {redis_url: "redis://cache:6379/0"}
    caches:
      - {action: add, name: "orders.local", type: memory}
      - {action: add, name: "orders.shared", type: redis, policy: {ttl_seconds: 600}}
      - action: add
        name: "orders.*"
        type: layered
        policy: {level1_cache_name: orders.local, level2_cache_name: orders.shared, sync_provider: redis}
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import redis
import yaml

from ...application.services.cache_registry import CacheRegistry, get_default_registry
from ...application.services.layered_cache import create_layered_cache
from ...config.settings import CacheSettings, get_cache_settings
from ...core.exceptions.cache import ConfigurationError
from ...core.protocols.cache import Cache
from ...core.value_objects.layered_cache_policy import LayeredCachePolicy
from ..distributors.memory_channel import InMemoryNotificationChannel
from ..distributors.redis_channel import RedisNotificationChannel
from ..repositories.memory_cache import MemoryCache
from ..repositories.no_cache import NoCache
from ..repositories.redis_cache import RedisCache
from ..serializers import create_serializer

logger = logging.getLogger(__name__)

RedisClientFactory = Callable[[str], redis.Redis]


class CacheAction(Enum):
    """Manifest cache actions."""
    ADD = "add"
    REMOVE = "remove"


class CacheType(Enum):
    """Cache implementations a manifest can create."""
    MEMORY = "memory"
    NO_CACHE = "no_cache"
    REDIS = "redis"
    LAYERED = "layered"


class NotificationType(Enum):
    """Notification channels a manifest can create."""
    MEMORY = "memory"
    REDIS = "redis"


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Invalid {field_name} '{value}', expected one of: {allowed}",
            {"field": field_name, "value": value}
        ) from None


@dataclass
class CacheConfigItem:
    """One cache entry of a manifest."""
    name: str
    action: CacheAction = CacheAction.ADD
    type: Optional[CacheType] = None
    policy: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheConfigItem":
        if not isinstance(data, dict) or not data.get("name"):
            raise ConfigurationError(f"Cache entry must have a name: {data!r}")

        action = _parse_enum(CacheAction, data.get("action", "add"), "action")
        cache_type = None
        if action == CacheAction.ADD:
            if "type" not in data:
                raise ConfigurationError(f"Cache entry '{data['name']}' must have a type")
            cache_type = _parse_enum(CacheType, data["type"], "type")

        return cls(
            name=str(data["name"]),
            action=action,
            type=cache_type,
            policy=dict(data.get("policy") or {})
        )


@dataclass
class NotificationConfigItem:
    """One notification provider entry of a manifest."""
    name: str
    type: NotificationType
    policy: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationConfigItem":
        if not isinstance(data, dict) or not data.get("name") or "type" not in data:
            raise ConfigurationError(f"Notification entry must have a name and a type: {data!r}")

        return cls(
            name=str(data["name"]),
            type=_parse_enum(NotificationType, data["type"], "type"),
            policy=dict(data.get("policy") or {})
        )


@dataclass
class CacheManifest:
    """Caches and notification providers to set up in a registry."""
    caches: List[CacheConfigItem] = field(default_factory=list)
    notifications: List[NotificationConfigItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CacheManifest":
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError("Cache manifest must be a mapping")

        return cls(
            caches=[CacheConfigItem.from_dict(item) for item in data.get("caches") or []],
            notifications=[NotificationConfigItem.from_dict(item) for item in data.get("notifications") or []]
        )

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "CacheManifest":
        """Load a manifest from a YAML or JSON file.

        Raises:
            ConfigurationError: If the file is missing, malformed or of an
                unsupported format
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ConfigurationError(f"Cache manifest not found: {file_path}", {"path": str(file_path)})

        suffix = file_path.suffix.lower()
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                if suffix in [".yaml", ".yml"]:
                    data = yaml.safe_load(f)
                elif suffix == ".json":
                    data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported cache manifest format: {file_path.suffix}",
                        {"path": str(file_path)}
                    )
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid cache manifest {file_path}: {e}", {"path": str(file_path)}) from e

        return cls.from_dict(data)


class ManifestApplier:
    """Applies a manifest to a registry.

    Notification providers are registered first so layered caches can
    refer to them. Cache entries are then applied in order, so a layered
    entry can use tiers added earlier in the same manifest.
    """

    def __init__(
        self,
        registry: CacheRegistry,
        settings: Optional[CacheSettings] = None,
        redis_client_factory: Optional[RedisClientFactory] = None
    ):
        self._registry = registry
        self._settings = settings or get_cache_settings()
        self._redis_client_factory = redis_client_factory or redis.Redis.from_url
        self._redis_clients: Dict[str, redis.Redis] = {}

    def apply(self, manifest: CacheManifest) -> None:
        for notification in manifest.notifications:
            self._register_notification(notification)

        for item in manifest.caches:
            if item.action == CacheAction.REMOVE:
                self._registry.remove(item.name)
                logger.info(f"Manifest removed cache {item.name}")
                continue

            cache = self._create_cache(item)
            self._registry.register(item.name, cache)
            logger.info(f"Manifest added cache {item.name} ({item.type.value})")

    def _redis_client(self, policy: Dict[str, Any]) -> redis.Redis:
        url = policy.get("redis_url") or self._settings.redis_url
        if url not in self._redis_clients:
            self._redis_clients[url] = self._redis_client_factory(url)
        return self._redis_clients[url]

    def _register_notification(self, item: NotificationConfigItem) -> None:
        if item.type == NotificationType.MEMORY:
            channel = InMemoryNotificationChannel()
        else:
            channel = RedisNotificationChannel(self._redis_client(item.policy))

        # One channel per provider, shared by every cache synchronized through it
        self._registry.register_notifier(item.name, lambda cache_name: channel)
        logger.info(f"Manifest registered notification provider {item.name} ({item.type.value})")

    def _create_cache(self, item: CacheConfigItem) -> Cache:
        policy = item.policy
        ttl_seconds = policy.get("ttl_seconds", self._settings.default_ttl_seconds)

        if item.type == CacheType.MEMORY:
            return MemoryCache(item.name, ttl_seconds=ttl_seconds)

        if item.type == CacheType.NO_CACHE:
            return NoCache(item.name)

        if item.type == CacheType.REDIS:
            return RedisCache(
                item.name,
                self._redis_client(policy),
                serializer=create_serializer(policy.get("serializer", self._settings.serializer)),
                key_prefix=policy.get("key_prefix", self._settings.key_prefix),
                ttl_seconds=ttl_seconds,
                lock_timeout_seconds=policy.get("lock_timeout_seconds", self._settings.lock_timeout_seconds),
                lock_blocking_timeout_seconds=policy.get(
                    "lock_blocking_timeout_seconds",
                    self._settings.lock_blocking_timeout_seconds
                )
            )

        return create_layered_cache(
            item.name,
            LayeredCachePolicy.from_dict(policy),
            registry=self._registry,
            topic_prefix=self._settings.channel_prefix
        )


def apply_manifest(
    registry: CacheRegistry,
    manifest: CacheManifest,
    settings: Optional[CacheSettings] = None,
    redis_client_factory: Optional[RedisClientFactory] = None
) -> None:
    """Apply a manifest to a registry.

    Args:
        registry: Registry receiving the caches and providers
        manifest: Manifest to apply
        settings: Defaults for values the manifest leaves out
        redis_client_factory: Creates a Redis client from a URL,
            ``redis.Redis.from_url`` when omitted
    """
    ManifestApplier(registry, settings, redis_client_factory).apply(manifest)


def initialize_from_config(
    registry: Optional[CacheRegistry] = None,
    path: Optional[Union[str, Path]] = None,
    settings: Optional[CacheSettings] = None,
    redis_client_factory: Optional[RedisClientFactory] = None
) -> Optional[CacheManifest]:
    """Load the configured manifest and apply it.

    Args:
        registry: Target registry, the process-wide registry when omitted
        path: Manifest path, ``NEO_CACHE_MANIFEST_PATH`` when omitted
        settings: Settings to use instead of the environment

    Returns:
        The applied manifest, or None when no manifest is configured
    """
    settings = settings or get_cache_settings()
    path = path or settings.manifest_path
    if not path:
        logger.debug("No cache manifest configured")
        return None

    if registry is None:
        registry = get_default_registry()

    manifest = CacheManifest.from_file(path)
    apply_manifest(registry, manifest, settings, redis_client_factory)
    logger.info(f"Applied cache manifest {path}: caches={len(manifest.caches)}, notifications={len(manifest.notifications)}")
    return manifest
