"""Pytest configuration and fixtures for neo-cache tests."""

import re
import threading
from typing import Any, Callable, Dict, Optional, Pattern

import pytest

from neo_cache.application.services.cache_registry import CacheRegistry, reset_default_registry
from neo_cache.config.settings import CacheSettings, get_cache_settings
from neo_cache.infrastructure.distributors.memory_channel import InMemoryNotificationChannel
from neo_cache.infrastructure.repositories.memory_cache import MemoryCache


def redis_glob_to_regex(glob: str) -> Pattern[str]:
    """Translate a Redis MATCH pattern, honouring backslash escapes."""
    parts = []
    i = 0
    while i < len(glob):
        char = glob[i]
        if char == "\\" and i + 1 < len(glob):
            parts.append(re.escape(glob[i + 1]))
            i += 2
            continue
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "[":
            end = glob.find("]", i + 1)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = glob[i + 1:end]
                negate = body.startswith("^")
                body = re.escape(body[1:] if negate else body).replace("\\-", "-")
                parts.append(f"[{'^' if negate else ''}{body}]")
                i = end
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


class FakeRedisServer:
    """Shared state behind one or more FakeRedis clients."""

    def __init__(self):
        self.data: Dict[str, bytes] = {}
        self.expiry: Dict[str, Optional[int]] = {}
        self.locks: Dict[str, threading.Lock] = {}
        self.subscribers: Dict[str, list] = {}
        self.mutex = threading.Lock()


class FakeLock:
    """Minimal stand-in for ``redis.lock.Lock``."""

    def __init__(self, server: FakeRedisServer, name: str, timeout: float, blocking_timeout: float):
        self.name = name
        self.timeout = timeout
        self.blocking_timeout = blocking_timeout
        self._server = server
        with server.mutex:
            self._lock = server.locks.setdefault(name, threading.Lock())

    def acquire(self) -> bool:
        acquired = self._lock.acquire(timeout=self.blocking_timeout)
        if acquired:
            # Real locks live in the keyspace as a token string
            with self._server.mutex:
                self._server.data[self.name] = b"lock-token"
        return acquired

    def release(self) -> None:
        with self._server.mutex:
            self._server.data.pop(self.name, None)
        self._lock.release()


class FakePubSubThread:
    def __init__(self):
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakePubSub:
    """Delivers published messages synchronously to subscribed callbacks."""

    def __init__(self, server: FakeRedisServer):
        self._server = server
        self.channels: Dict[str, Callable[[Dict[str, Any]], None]] = {}
        self.thread: Optional[FakePubSubThread] = None
        self.closed = False

    def subscribe(self, **handlers) -> None:
        with self._server.mutex:
            for channel, handler in handlers.items():
                self.channels[channel] = handler
                self._server.subscribers.setdefault(channel, []).append(self)

    def unsubscribe(self, *channels) -> None:
        with self._server.mutex:
            for channel in channels:
                self.channels.pop(channel, None)
                subscribers = self._server.subscribers.get(channel, [])
                if self in subscribers:
                    subscribers.remove(self)

    def run_in_thread(self, sleep_time: float = 0.0, daemon: bool = False) -> FakePubSubThread:
        self.thread = FakePubSubThread()
        return self.thread

    def close(self) -> None:
        self.closed = True
        self.unsubscribe(*list(self.channels))

    def deliver(self, channel: str, data: bytes) -> None:
        handler = self.channels.get(channel)
        if handler is not None:
            handler({"type": "message", "pattern": None, "channel": channel.encode(), "data": data})


class FakeRedis:
    """In-memory stand-in for the parts of ``redis.Redis`` the cache uses."""

    def __init__(self, server: Optional[FakeRedisServer] = None):
        self.server = server or FakeRedisServer()
        self.closed = False
        self.fail_with: Optional[Exception] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def get(self, key: str) -> Optional[bytes]:
        self._check()
        with self.server.mutex:
            return self.server.data.get(key)

    def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self._check()
        if isinstance(value, str):
            value = value.encode("utf-8")
        with self.server.mutex:
            self.server.data[key] = value
            self.server.expiry[key] = ex
        return True

    def delete(self, *keys: Any) -> int:
        self._check()
        removed = 0
        with self.server.mutex:
            for key in keys:
                if isinstance(key, bytes):
                    key = key.decode("utf-8")
                if self.server.data.pop(key, None) is not None:
                    removed += 1
                self.server.expiry.pop(key, None)
        return removed

    def scan_iter(self, match: str = "*", count: Optional[int] = None):
        self._check()
        with self.server.mutex:
            keys = list(self.server.data)
        pattern = redis_glob_to_regex(match)
        for key in keys:
            if pattern.fullmatch(key):
                yield key.encode("utf-8")

    def lock(self, name: str, timeout: float = None, blocking_timeout: float = None) -> FakeLock:
        self._check()
        return FakeLock(self.server, name, timeout, blocking_timeout)

    def publish(self, channel: str, message: Any) -> int:
        self._check()
        if isinstance(message, str):
            message = message.encode("utf-8")
        with self.server.mutex:
            subscribers = list(self.server.subscribers.get(channel, []))
        for pubsub in subscribers:
            pubsub.deliver(channel, message)
        return len(subscribers)

    def pubsub(self, ignore_subscribe_messages: bool = False) -> FakePubSub:
        self._check()
        return FakePubSub(self.server)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis_server():
    """Shared fake Redis state."""
    return FakeRedisServer()


@pytest.fixture
def fake_redis(fake_redis_server):
    """Fake Redis client."""
    return FakeRedis(fake_redis_server)


@pytest.fixture
def fake_redis_factory(fake_redis_server):
    """Create fake Redis clients sharing one server, like separate processes would."""
    return lambda: FakeRedis(fake_redis_server)


@pytest.fixture
def registry():
    """Empty cache registry."""
    registry = CacheRegistry()
    yield registry
    registry.shutdown()


@pytest.fixture
def memory_cache():
    """Empty memory cache."""
    return MemoryCache("test.memory")


@pytest.fixture
def memory_channel():
    """In-process notification channel."""
    channel = InMemoryNotificationChannel()
    yield channel
    channel.close()


@pytest.fixture
def cache_settings():
    """Settings independent of the environment."""
    return CacheSettings()


@pytest.fixture(autouse=True)
def clean_global_state(monkeypatch):
    """Isolate tests from NEO_CACHE_* variables and the process-wide registry."""
    for name in [
        "NEO_CACHE_REDIS_URL",
        "NEO_CACHE_KEY_PREFIX",
        "NEO_CACHE_CHANNEL_PREFIX",
        "NEO_CACHE_DEFAULT_TTL_SECONDS",
        "NEO_CACHE_LOCK_TIMEOUT_SECONDS",
        "NEO_CACHE_LOCK_BLOCKING_TIMEOUT_SECONDS",
        "NEO_CACHE_SERIALIZER",
        "NEO_CACHE_MANIFEST_PATH",
    ]:
        monkeypatch.delenv(name, raising=False)
    get_cache_settings.cache_clear()
    yield
    get_cache_settings.cache_clear()
    reset_default_registry()
