"""Tests for cache name matching."""

import pytest

from neo_cache.core.entities.registered_cache import RegisteredCache
from neo_cache.core.value_objects.cache_name import CacheName, score
from neo_cache.infrastructure.repositories.no_cache import NoCache


class TestScore:
    """Test cases for the name matching score."""

    def test_exact_pattern_scores_its_length(self):
        assert score("a.b", "a.b") == 3

    def test_exact_pattern_does_not_match_other_names(self):
        assert score("a.b", "a.bc") == 0
        assert score("a.b", "a") == 0

    def test_wildcard_scores_literal_prefix_length(self):
        assert score("a.*", "a.b.c") == 2
        assert score("a.b.*", "a.b.c") == 4

    def test_wildcard_without_match_scores_zero(self):
        assert score("a.*", "b.c") == 0

    def test_bare_wildcard_scores_zero(self):
        assert score("*", "anything") == 0

    def test_matching_is_case_sensitive(self):
        assert score("Orders", "orders") == 0
        assert score("Orders.*", "orders.daily") == 0

    @pytest.mark.parametrize("pattern,name", [
        ("orders", "orders"),
        ("orders.*", "orders.daily"),
        ("orders.*", "orders."),
        ("orders*", "ordersarchive"),
    ])
    def test_wildcard_and_exact_matches(self, pattern, name):
        assert CacheName(pattern).matches(name)


class TestCacheName:
    """Test cases for CacheName value object."""

    def test_exact_name_has_no_wildcard(self):
        name = CacheName("orders.daily")

        assert name.has_wildcard is False
        assert name.prefix == "orders.daily"
        assert str(name) == "orders.daily"

    def test_wildcard_name_splits_prefix(self):
        name = CacheName("orders.*")

        assert name.has_wildcard is True
        assert name.prefix == "orders."

    def test_wildcard_only_recognized_at_end(self):
        name = CacheName("orders.*.daily")

        assert name.has_wildcard is False
        assert not name.matches("orders.x.daily")

    def test_equality_and_hash_by_text(self):
        assert CacheName("a.*") == CacheName("a.*")
        assert hash(CacheName("a.*")) == hash(CacheName("a.*"))
        assert CacheName("a.*") != CacheName("A.*")
        assert len({CacheName("a.b"), CacheName("a.b")}) == 1

    def test_is_immutable(self):
        name = CacheName("a.b")

        with pytest.raises(AttributeError):
            name.value = "c.d"

    def test_none_rejected(self):
        with pytest.raises(ValueError):
            CacheName(None)


class TestRegisteredCache:
    """Test cases for registry rows."""

    def test_covers_matching_name(self):
        row = RegisteredCache(pattern=CacheName("a.*"), cache=NoCache("a"))

        assert row.covers("a.b")
        assert row.score("a.b") == 2

    def test_does_not_cover_unmatched_name(self):
        row = RegisteredCache(pattern=CacheName("a.*"), cache=NoCache("a"))

        assert not row.covers("b.c")

    def test_explicit_bare_wildcard_covers_everything(self):
        row = RegisteredCache(pattern=CacheName("*"), cache=NoCache("all"))

        assert row.covers("anything")
        assert row.score("anything") == 0
