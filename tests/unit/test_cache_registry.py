"""Tests for the cache registry."""

import threading

import pytest

from neo_cache.application.services.cache_registry import (
    CacheRegistry,
    get_default_registry,
    reset_default_registry,
)
from neo_cache.application.services.cache_synchronizer import SynchronizedCache
from neo_cache.application.services.layered_cache import LayeredCache
from neo_cache.core.exceptions import InvalidArgumentError, TypeMismatchError
from neo_cache.core.protocols.cache import Cache
from neo_cache.infrastructure.distributors import InMemoryNotificationChannel, RedisNotificationChannel
from neo_cache.infrastructure.repositories.memory_cache import MemoryCache
from neo_cache.infrastructure.repositories.no_cache import NoCache


class ClosableCache(NoCache):
    def __init__(self, name):
        super().__init__(name)
        self.closed = 0

    def close(self):
        self.closed += 1


class TestResolve:
    """Test cases for name resolution."""

    @pytest.mark.parametrize("exact_first", [True, False])
    def test_exact_beats_wildcard_regardless_of_order(self, registry, exact_first):
        exact = MemoryCache("exact")
        wildcard = MemoryCache("wildcard")

        if exact_first:
            registry.register("a.b", exact)
            registry.register("a.*", wildcard)
        else:
            registry.register("a.*", wildcard)
            registry.register("a.b", exact)

        assert registry.resolve("a.b") is exact
        assert registry.resolve("a.c") is wildcard

    def test_longer_prefix_wins(self, registry):
        short = MemoryCache("short")
        long = MemoryCache("long")
        registry.register("a.*", short)
        registry.register("a.b.*", long)

        assert registry.resolve("a.b.c") is long
        assert registry.resolve("a.x") is short

    def test_empty_registry_returns_none(self, registry):
        assert registry.resolve("a.b") is None

    def test_unmatched_name_returns_none(self, registry):
        registry.register("a.*", MemoryCache("a"))
        registry.register("a.b", MemoryCache("ab"))

        assert registry.resolve("b.c") is None
        assert registry.resolve("a") is None

    def test_bare_wildcard_only_when_registered(self, registry):
        registry.register("a.*", MemoryCache("a"))
        assert registry.resolve("zzz") is None

        catch_all = MemoryCache("all")
        registry.register("*", catch_all)

        assert registry.resolve("zzz") is catch_all
        assert registry.resolve("a.b") is not catch_all

    @pytest.mark.parametrize("order", [("a.b*", "a.b"), ("a.b", "a.b*")])
    def test_equal_score_prefers_literal_pattern(self, registry, order):
        caches = {"a.b*": MemoryCache("wildcard"), "a.b": MemoryCache("literal")}
        for pattern in order:
            registry.register(pattern, caches[pattern])

        assert registry.resolve("a.b") is caches["a.b"]
        assert registry.resolve("a.bc") is caches["a.b*"]

    def test_resolution_is_case_sensitive(self, registry):
        registry.register("Orders.*", MemoryCache("orders"))

        assert registry.resolve("orders.daily") is None

    def test_resolve_none_raises(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.resolve(None)

    def test_empty_name_is_valid(self, registry):
        empty = MemoryCache("")
        registry.register("", empty)

        assert registry.resolve("") is empty

    def test_resolve_for_class(self, registry):
        cache = MemoryCache("by-class")
        registry.register(f"{TestResolve.__module__}.*", cache)

        assert registry.resolve_for_class(TestResolve) is cache


class TestRegistration:
    """Test cases for register and remove."""

    def test_register_replaces_existing_pattern(self, registry):
        first = MemoryCache("first")
        second = MemoryCache("second")
        registry.register("a.b", first)
        registry.register("a.b", second)

        assert registry.resolve("a.b") is second
        assert len(registry) == 1

    def test_register_none_removes(self, registry):
        registry.register("a.*", MemoryCache("a"))
        registry.register("a.*", None)

        assert registry.resolve("a.b") is None
        assert "a.*" not in registry

    def test_remove_falls_back_to_less_specific_pattern(self, registry):
        general = MemoryCache("general")
        registry.register("a.*", general)
        registry.register("a.b.*", MemoryCache("specific"))

        registry.remove("a.b.*")

        assert registry.resolve("a.b.c") is general

    def test_remove_unknown_pattern_is_noop(self, registry):
        registry.remove("missing")

        assert len(registry) == 0

    def test_remove_all(self, registry):
        registry.register("a", MemoryCache("a"))
        registry.register("b.*", MemoryCache("b"))

        registry.remove_all()

        assert len(registry) == 0
        assert registry.resolve("a") is None

    def test_register_none_pattern_raises(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.register(None, MemoryCache("a"))

    def test_replacing_synchronized_cache_detaches_it(self, registry, memory_channel):
        old = SynchronizedCache(MemoryCache("orders"), memory_channel)
        registry.register("orders", old)

        registry.register("orders", MemoryCache("orders"))

        assert not old.synchronizer.is_active
        assert memory_channel.subscriber_count(old.synchronizer.topic) == 0

    def test_removing_synchronized_cache_detaches_it(self, registry, memory_channel):
        old = SynchronizedCache(MemoryCache("orders"), memory_channel)
        registry.register("orders", old)

        registry.remove("orders")

        assert not old.synchronizer.is_active

    def test_cache_still_registered_elsewhere_stays_attached(self, registry, memory_channel):
        shared = SynchronizedCache(MemoryCache("orders"), memory_channel)
        registry.register("orders", shared)
        registry.register("orders.*", shared)

        registry.register("orders", MemoryCache("orders"))

        assert shared.synchronizer.is_active
        assert registry.resolve("orders.daily") is shared

    def test_remove_all_detaches_synchronized_caches(self, registry, memory_channel):
        synchronized = SynchronizedCache(MemoryCache("orders"), memory_channel)
        registry.register("orders", synchronized)

        registry.remove_all()

        assert not synchronized.synchronizer.is_active

    def test_list_names_returns_cache_names(self, registry):
        registry.register("orders.*", MemoryCache("orders-cache"))
        registry.register("users", NoCache("users-cache"))

        assert sorted(registry.list_names()) == ["orders-cache", "users-cache"]


class TestResolveTyped:
    """Test cases for typed resolution."""

    def test_returns_cache_with_capability(self, registry):
        cache = MemoryCache("a")
        registry.register("a", cache)

        assert registry.resolve_typed("a", MemoryCache) is cache
        assert registry.resolve_typed("a", Cache) is cache

    def test_mismatch_raises_naming_expected_capability(self, registry):
        registry.register("a", NoCache("a"))

        with pytest.raises(TypeMismatchError) as exc_info:
            registry.resolve_typed("a", MemoryCache)

        assert "MemoryCache" in str(exc_info.value)
        assert exc_info.value.details["expected"] == "MemoryCache"

    def test_unmatched_name_returns_none(self, registry):
        assert registry.resolve_typed("missing", MemoryCache) is None

    def test_unmatched_name_is_not_a_type_mismatch(self, registry):
        registry.register("orders.*", NoCache("orders"))

        assert registry.resolve_typed("users", MemoryCache) is None

        with pytest.raises(TypeMismatchError):
            registry.resolve_typed("orders.daily", MemoryCache)

    def test_unwraps_decorators(self, registry, memory_channel):
        layered = LayeredCache("orders", MemoryCache("orders.l1"), MemoryCache("orders.l2"))
        synchronized = SynchronizedCache(layered, memory_channel)
        registry.register("orders", synchronized)

        assert registry.resolve_typed("orders", SynchronizedCache) is synchronized
        assert registry.resolve_typed("orders", LayeredCache) is layered


class TestNotifiers:
    """Test cases for notification providers."""

    def test_factory_receives_cache_name(self, registry, memory_channel):
        requested = []

        def factory(cache_name):
            requested.append(cache_name)
            return memory_channel

        registry.register_notifier("memory", factory)

        assert registry.get_notifier_for_cache("orders", "memory") is memory_channel
        assert requested == ["orders"]

    def test_unknown_provider_returns_none(self, registry):
        assert registry.get_notifier_for_cache("orders", "missing") is None

    def test_register_none_removes_provider(self, registry, memory_channel):
        registry.register_notifier("memory", lambda name: memory_channel)
        registry.register_notifier("memory", None)

        assert registry.get_notifier_for_cache("orders", "memory") is None


class TestLifecycle:
    """Test cases for shutdown and the process-wide registry."""

    def test_shutdown_closes_caches_once(self):
        registry = CacheRegistry()
        cache = ClosableCache("shared")
        registry.register("a", cache)
        registry.register("b", cache)

        registry.shutdown()

        assert cache.closed == 1
        assert len(registry) == 0

    def test_shutdown_continues_after_close_failure(self):
        class FailingClose(ClosableCache):
            def close(self):
                raise RuntimeError("boom")

        registry = CacheRegistry()
        healthy = ClosableCache("healthy")
        registry.register("a", FailingClose("failing"))
        registry.register("b", healthy)

        registry.shutdown()

        assert healthy.closed == 1

    def test_shutdown_closes_notification_channels_once(self):
        registry = CacheRegistry()
        channel = InMemoryNotificationChannel()
        registry.register_notifier("memory", lambda cache_name: channel)
        registry.get_notifier_for_cache("orders", "memory")
        registry.get_notifier_for_cache("users", "memory")

        registry.shutdown()

        with pytest.raises(RuntimeError):
            channel.subscribe("orders", lambda event: None)

    def test_shutdown_stops_redis_channel_listener(self, fake_redis):
        registry = CacheRegistry()
        channel = RedisNotificationChannel(fake_redis)
        registry.register_notifier("redis", lambda cache_name: channel)
        registry.get_notifier_for_cache("orders", "redis").subscribe("orders", lambda event: None)
        assert channel.is_listening

        registry.shutdown()

        assert not channel.is_listening

    def test_shutdown_continues_after_channel_close_failure(self):
        class FailingChannel(InMemoryNotificationChannel):
            def close(self):
                raise RuntimeError("boom")

        registry = CacheRegistry()
        healthy = InMemoryNotificationChannel()
        registry.register_notifier("failing", lambda cache_name: FailingChannel())
        registry.register_notifier("healthy", lambda cache_name: healthy)
        registry.get_notifier_for_cache("orders", "failing")
        registry.get_notifier_for_cache("orders", "healthy")

        registry.shutdown()

        with pytest.raises(RuntimeError):
            healthy.publish("orders", None)

    def test_default_registry_is_shared_until_reset(self):
        registry = get_default_registry()

        assert get_default_registry() is registry

        reset_default_registry()

        assert get_default_registry() is not registry


class TestConcurrency:
    """Test cases for concurrent access."""

    def test_concurrent_register_and_resolve(self, registry):
        general = MemoryCache("general")
        registry.register("a.*", general)
        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                cache = registry.resolve("a.b.c")
                if cache is None:
                    errors.append("resolved None while a.* was registered")

        def writer():
            for i in range(200):
                registry.register("a.b.*", MemoryCache(f"specific-{i}"))
                registry.remove("a.b.*")

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for thread in readers:
            thread.start()
        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        writer_thread.join()
        stop.set()
        for thread in readers:
            thread.join()

        assert errors == []
        assert registry.resolve("a.b.c") is general
