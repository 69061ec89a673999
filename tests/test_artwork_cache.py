"""Tests for the byte-budgeted LRU artwork cache."""

from __future__ import annotations

import threading

import pytest

from browse_core.artwork_cache import ArtworkCache


def test_get_miss_returns_none():
    cache = ArtworkCache(100)
    assert cache.get("https://x.test/a.png") is None


def test_put_and_get():
    cache = ArtworkCache(100)
    assert cache.put("a", b"12345")
    assert cache.get("a") == b"12345"
    assert cache.size_bytes == 5
    assert len(cache) == 1


def test_evicts_least_recently_inserted_first():
    cache = ArtworkCache(10)
    cache.put("a", b"aaaa")
    cache.put("b", b"bbbb")
    cache.put("c", b"cccc")  # 12 bytes > 10 → "a" goes

    assert "a" not in cache
    assert "b" in cache and "c" in cache
    assert cache.size_bytes == 8


def test_access_refreshes_recency():
    cache = ArtworkCache(10)
    cache.put("a", b"aaaa")
    cache.put("b", b"bbbb")
    assert cache.get("a") == b"aaaa"  # "b" is now least recently used

    cache.put("c", b"cccc")

    assert "b" not in cache
    assert "a" in cache and "c" in cache


def test_total_never_exceeds_budget():
    cache = ArtworkCache(50)
    for i in range(40):
        cache.put(f"k{i}", bytes(7 + i % 5))
        assert cache.size_bytes <= 50


def test_oversize_value_is_rejected_without_evicting():
    cache = ArtworkCache(10)
    cache.put("a", b"aaaa")
    assert cache.put("big", bytes(11)) is False
    assert "big" not in cache
    assert cache.get("a") == b"aaaa"


def test_replacing_key_updates_size():
    cache = ArtworkCache(10)
    cache.put("a", b"aaaaaaaa")
    cache.put("a", b"aa")
    assert cache.size_bytes == 2
    assert cache.get("a") == b"aa"


def test_clear():
    cache = ArtworkCache(10)
    cache.put("a", b"aa")
    cache.clear()
    assert len(cache) == 0
    assert cache.size_bytes == 0


def test_rejects_non_positive_budget():
    with pytest.raises(ValueError):
        ArtworkCache(0)


def test_concurrent_put_and_get_stay_within_budget():
    cache = ArtworkCache(1000)

    def writer(prefix: str):
        for i in range(200):
            cache.put(f"{prefix}{i}", bytes(37))
            cache.get(f"{prefix}{i // 2}")

    threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.size_bytes <= 1000
    assert cache.size_bytes == 37 * len(cache)
