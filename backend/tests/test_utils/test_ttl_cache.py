"""
Unit tests for the expiring key-value cache
"""
from storefront.utils.cache import TTLCache


class FakeClock:

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestTTLCache:

    def test_returns_value_before_expiry(self):
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=300, clock=clock)
        cache.set("store", {"slug": "doces"})

        clock.now += 299
        assert cache.get("store") == {"slug": "doces"}

    def test_entry_expires_after_ttl(self):
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=300, clock=clock)
        cache.set("store", {"slug": "doces"})

        clock.now += 300
        assert cache.get("store") is None
        assert "store" not in cache
        assert len(cache) == 0

    def test_without_ttl_entries_never_expire(self):
        clock = FakeClock()
        cache = TTLCache(clock=clock)
        cache.set("slug", None)

        clock.now += 10 ** 9
        assert "slug" in cache
        assert cache.get("slug", "missing") is None

    def test_invalidate_and_clear(self):
        cache = TTLCache(ttl_seconds=60)
        cache.set("a", 1)
        cache.set("b", 2)

        cache.invalidate("a")
        cache.invalidate("unknown")
        assert "a" not in cache
        assert cache.get("b") == 2

        cache.clear()
        assert len(cache) == 0
