"""Tests for the response cache."""

from conftest import FakeClock

from fantasy_sync.core.cache import CacheTTL, ResourceClass, ResponseCache, make_key
from fantasy_sync.core.config import Settings


class TestTTLBoundaries:
    """Entries are served up to and including their TTL, never after."""

    def test_hit_just_before_expiry(self):
        clock = FakeClock(start=100.0)
        cache = ResponseCache(clock=clock)
        key = make_key("sleeper", "leagues", "user1")
        cache.set(key, ["league"], ttl_ms=300_000)

        clock.advance(299.999)
        assert cache.get(key) == ["league"]

    def test_miss_just_after_expiry(self):
        clock = FakeClock(start=100.0)
        cache = ResponseCache(clock=clock)
        key = make_key("sleeper", "leagues", "user1")
        cache.set(key, ["league"], ttl_ms=300_000)

        clock.advance(300.001)
        assert cache.get(key) is None

    def test_stale_entry_removed_on_read(self):
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        key = make_key("espn", "teams", "42")
        cache.set(key, [], ttl_ms=1000)
        assert len(cache) == 1

        clock.advance(2)
        assert cache.get(key) is None
        assert len(cache) == 0

    def test_set_refreshes_timestamp(self):
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        key = make_key("cbs", "players", "7", "season")
        cache.set(key, "old", ttl_ms=1000)
        clock.advance(0.9)
        cache.set(key, "new", ttl_ms=1000)
        clock.advance(0.9)

        assert cache.get(key) == "new"


class TestCacheOperations:

    def test_absent_key_is_miss(self):
        assert ResponseCache().get(make_key("yahoo", "leagues", "nobody")) is None

    def test_keys_do_not_collide_across_providers(self):
        cache = ResponseCache()
        cache.set(make_key("yahoo", "players", "123"), "yahoo player", ttl_ms=60_000)
        cache.set(make_key("espn", "players", "123"), "espn player", ttl_ms=60_000)

        assert cache.get(make_key("yahoo", "players", "123")) == "yahoo player"
        assert cache.get(make_key("espn", "players", "123")) == "espn player"

    def test_make_key_stringifies_components(self):
        assert make_key("sleeper", "stats", 4046, 3) == ("sleeper", "stats", "4046", "3")

    def test_clear(self):
        cache = ResponseCache()
        cache.set(make_key("sleeper", "leagues", "u"), [], ttl_ms=1000)
        cache.clear()
        assert len(cache) == 0

    def test_purge_expired(self):
        clock = FakeClock()
        cache = ResponseCache(clock=clock)
        cache.set(make_key("sleeper", "stats", "1", "3"), {}, ttl_ms=30_000)
        cache.set(make_key("sleeper", "leagues", "u"), [], ttl_ms=300_000)

        clock.advance(60)
        assert cache.purge_expired() == 1
        assert len(cache) == 1


class TestCacheTTL:

    def test_defaults(self):
        ttl = CacheTTL()
        assert ttl.for_resource(ResourceClass.leagues) == 300_000
        assert ttl.for_resource("teams") == 120_000
        assert ttl.for_resource("players") == 60_000
        assert ttl.for_resource("stats") == 30_000

    def test_from_settings(self):
        ttl = CacheTTL.from_settings(Settings(cache_ttl_stats_ms=5_000))
        assert ttl.stats == 5_000
        assert ttl.leagues == 300_000
