"""Tests for the SpecCache module."""

from __future__ import annotations

import pytest

from apiscope.cache import SpecCache
from apiscope.models import CacheConfig

URL = "https://api.example.com/openapi.json"


@pytest.fixture()
def cache(tmp_path):
    """Create an enabled SpecCache pointing at tmp_path."""
    c = SpecCache(tmp_path, CacheConfig(enabled=True, ttl_seconds=300))
    yield c
    c.close()


@pytest.fixture()
def disabled_cache(tmp_path):
    """Create a disabled SpecCache."""
    c = SpecCache(tmp_path, CacheConfig(enabled=False, ttl_seconds=300))
    yield c
    c.close()


# ------------------------------------------------------------------ #
# Core get/set behaviour
# ------------------------------------------------------------------ #


class TestGetSet:
    def test_set_and_get(self, cache: SpecCache) -> None:
        cache.set(URL, '{"openapi": "3.0.0"}', "application/json")
        assert cache.get(URL) == ('{"openapi": "3.0.0"}', "application/json")

    def test_miss_returns_none(self, cache: SpecCache) -> None:
        assert cache.get("https://api.example.com/other.yaml") is None

    def test_content_type_defaults_to_empty(self, cache: SpecCache) -> None:
        cache.set(URL, "openapi: 3.0.0")
        assert cache.get(URL) == ("openapi: 3.0.0", "")

    def test_overwrite(self, cache: SpecCache) -> None:
        cache.set(URL, "old")
        cache.set(URL, "new")
        assert cache.get(URL)[0] == "new"

    def test_entries_survive_reopen(self, tmp_path) -> None:
        config = CacheConfig(enabled=True, ttl_seconds=300)
        first = SpecCache(tmp_path, config)
        first.set(URL, "persisted")
        first.close()
        second = SpecCache(tmp_path, config)
        try:
            assert second.get(URL) == ("persisted", "")
        finally:
            second.close()


# ------------------------------------------------------------------ #
# Invalidation
# ------------------------------------------------------------------ #


class TestInvalidation:
    def test_invalidate_one(self, cache: SpecCache) -> None:
        other = "https://api.example.com/v2.json"
        cache.set(URL, "a")
        cache.set(other, "b")
        cache.invalidate(URL)
        assert cache.get(URL) is None
        assert cache.get(other) is not None

    def test_clear(self, cache: SpecCache) -> None:
        cache.set(URL, "a")
        cache.clear()
        assert cache.get(URL) is None
        assert cache.stats()["size"] == 0


# ------------------------------------------------------------------ #
# Disabled cache
# ------------------------------------------------------------------ #


class TestDisabled:
    def test_everything_is_a_no_op(self, disabled_cache: SpecCache, tmp_path) -> None:
        assert not disabled_cache.enabled
        disabled_cache.set(URL, "a")
        assert disabled_cache.get(URL) is None
        disabled_cache.invalidate(URL)
        disabled_cache.clear()
        assert not (tmp_path / "specs").exists()

    def test_stats(self, disabled_cache: SpecCache) -> None:
        assert disabled_cache.stats() == {"enabled": False}


class TestStats:
    def test_enabled_stats(self, cache: SpecCache, tmp_path) -> None:
        cache.set(URL, "a")
        stats = cache.stats()
        assert stats["enabled"] is True
        assert stats["size"] == 1
        assert stats["directory"] == str(tmp_path / "specs")
        assert stats["ttl_seconds"] == 300
