"""Tests for the in-memory TTL cache."""

from unittest.mock import patch

import pytest

from mlb_preview_agent.agents.stats_agent.cache import CacheEntry, TTLCache


@pytest.fixture
def cache():
    return TTLCache(ttl=300)


def test_cache_set_and_get(cache):
    """Test basic set/get roundtrip."""
    data = {"teams": [{"id": 137}]}
    cache.set("https://statsapi.mlb.com/api/v1/teams/137", data)

    assert cache.get("https://statsapi.mlb.com/api/v1/teams/137") == data
    assert len(cache) == 1
    assert "https://statsapi.mlb.com/api/v1/teams/137" in cache


def test_cache_returns_none_for_missing_key(cache):
    assert cache.get("nonexistent_key") is None
    assert cache.metrics.misses == 1


def test_entry_expires_exactly_at_ttl():
    entry = CacheEntry(data={}, timestamp=1000.0)
    assert not entry.is_expired(300, 1299.9)
    assert entry.is_expired(300, 1300.0)


def test_cache_evicts_expired_entry_on_read(cache):
    """Test expiry by mocking time."""
    with patch("time.time", return_value=1000.0):
        cache.set("schedule", {"dates": []})

    with patch("time.time", return_value=1299.0):
        assert cache.get("schedule") == {"dates": []}

    with patch("time.time", return_value=1300.0):
        assert cache.get("schedule") is None

    # Evicted lazily on the expired read
    assert "schedule" not in cache
    assert cache.metrics.expirations == 1


def test_cache_set_refreshes_timestamp(cache):
    with patch("time.time", return_value=1000.0):
        cache.set("key", 1)
    with patch("time.time", return_value=1200.0):
        cache.set("key", 2)
    with patch("time.time", return_value=1400.0):
        assert cache.get("key") == 2


def test_cache_clear_keeps_metrics(cache):
    cache.set("a", 1)
    cache.get("a")
    cache.clear()

    assert len(cache) == 0
    assert cache.get("a") is None
    assert cache.metrics.hits == 1


def test_cache_stats(cache):
    cache.set("a", 1)
    cache.get("a")
    cache.get("b")

    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["keys"] == ["a"]
    assert stats["ttl"] == 300
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0
