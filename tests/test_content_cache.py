"""Tests for the content cache"""

import pytest

from scribe.cache.content_cache import ContentCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ContentCache(max_entries=3, ttl_seconds=60, clock=clock)


class TestStore:
    def test_store_then_get(self, cache):
        result = cache.store("abc")

        assert result.is_new is True
        assert result.size == 3
        assert result.content_id.startswith("content_")
        assert cache.get(result.content_id) == "abc"

    def test_identical_content_is_deduplicated(self, cache):
        first = cache.store("abc")
        second = cache.store("abc")

        assert first.content_id == second.content_id
        assert first.is_new is True
        assert second.is_new is False
        assert len(cache) == 1

    def test_distinct_content_gets_distinct_ids(self, cache):
        a = cache.store("alpha")
        b = cache.store("beta")

        assert a.content_id != b.content_id
        assert len(cache) == 2

    def test_empty_content_rejected(self, cache):
        with pytest.raises(ValueError):
            cache.store("")

    def test_to_dict_uses_wire_names(self, cache):
        data = cache.store("x" * 2048).to_dict()

        assert data["isNew"] is True
        assert data["size"] == 2048
        assert data["sizeFormatted"] == "2.0 KB"
        assert "contentId" in data


class TestEviction:
    def test_capacity_never_exceeded(self, cache, clock):
        for i in range(10):
            clock.advance(1)
            cache.store(f"doc {i}")
            assert len(cache) <= 3

    def test_evicts_least_recently_accessed(self, cache, clock):
        a = cache.store("a")
        clock.advance(1)
        b = cache.store("b")
        clock.advance(1)
        c = cache.store("c")
        clock.advance(1)

        # touch a so b becomes the oldest
        assert cache.get(a.content_id) == "a"
        clock.advance(1)
        cache.store("d")

        assert cache.get(b.content_id) is None
        assert cache.get(a.content_id) == "a"
        assert cache.get(c.content_id) == "c"

    def test_store_hit_refreshes_recency(self, cache, clock):
        a = cache.store("a")
        clock.advance(1)
        b = cache.store("b")
        clock.advance(1)
        cache.store("c")
        clock.advance(1)

        assert cache.store("a").is_new is False
        clock.advance(1)
        cache.store("d")

        assert cache.get(a.content_id) == "a"
        assert cache.get(b.content_id) is None

    def test_evicted_content_can_be_stored_again(self, cache, clock):
        first = cache.store("a")
        for doc in ("b", "c", "d"):
            clock.advance(1)
            cache.store(doc)

        again = cache.store("a")
        assert again.is_new is True
        assert again.content_id != first.content_id


class TestExpiry:
    def test_expired_entry_not_returned(self, cache, clock):
        result = cache.store("abc")
        clock.advance(61)

        assert cache.get(result.content_id) is None
        assert len(cache) == 0

    def test_access_extends_lifetime(self, cache, clock):
        result = cache.store("abc")
        clock.advance(50)
        assert cache.get(result.content_id) == "abc"
        clock.advance(50)

        assert cache.get(result.content_id) == "abc"

    def test_store_after_expiry_allocates_new_id(self, cache, clock):
        first = cache.store("abc")
        clock.advance(61)

        second = cache.store("abc")

        assert second.is_new is True
        assert second.content_id != first.content_id
        assert cache.get(first.content_id) is None
        assert cache.get(second.content_id) == "abc"

    def test_unknown_id(self, cache):
        assert cache.get("content_missing") is None
        assert cache.get(None) is None


class TestStats:
    def test_stats(self, cache, clock):
        cache.store("abc")
        clock.advance(5)
        cache.store("défg")

        stats = cache.stats()

        assert stats["count"] == 2
        assert stats["max_entries"] == 3
        assert stats["total_bytes"] == 3 + len("défg".encode("utf-8"))
        ages = sorted(item["age_seconds"] for item in stats["items"])
        assert ages == [0, 5]

    def test_clear(self, cache):
        result = cache.store("abc")
        cache.clear()

        assert len(cache) == 0
        assert cache.get(result.content_id) is None
