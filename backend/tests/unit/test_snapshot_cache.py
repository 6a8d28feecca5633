"""Unit tests for the single-slot TTL cache."""

import pytest

from guildroster.utils.cache import DEFAULT_TTL_SECONDS, SnapshotCache
from conftest import FakeClock


class TestSnapshotCacheInit:
    """Tests for construction."""

    def test_default_ttl_is_five_minutes(self) -> None:
        cache = SnapshotCache()
        assert cache.ttl_seconds == DEFAULT_TTL_SECONDS == 300.0

    def test_custom_ttl(self) -> None:
        assert SnapshotCache(ttl_seconds=10).ttl_seconds == 10.0

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_rejects_non_positive_ttl(self, ttl: float) -> None:
        with pytest.raises(ValueError):
            SnapshotCache(ttl_seconds=ttl)

    def test_starts_empty(self) -> None:
        cache = SnapshotCache()
        assert cache.get(0.0) is None
        assert cache.age(0.0) is None


class TestSnapshotCacheExpiry:
    """Tests for the staleness bound."""

    def test_ttl_boundary(self) -> None:
        cache = SnapshotCache(ttl_seconds=300)
        listing = ({"id": "1"},)
        cache.put(listing, now=1.0)

        assert cache.get(now=1.0) is listing
        assert cache.get(now=300.999) is listing
        assert cache.get(now=301.0) is None

    def test_expired_entry_is_kept_until_replaced(self) -> None:
        cache = SnapshotCache(ttl_seconds=5)
        cache.put("old", now=0.0)
        assert cache.get(now=10.0) is None
        # get never mutates, so an earlier "now" still sees the value
        assert cache.get(now=4.0) == "old"

    def test_put_replaces_value_and_timestamp(self) -> None:
        cache = SnapshotCache(ttl_seconds=10)
        cache.put("first", now=0.0)
        cache.put("second", now=8.0)
        assert cache.get(now=12.0) == "second"
        assert cache.get(now=18.0) is None

    def test_follows_latest_put(self) -> None:
        cache = SnapshotCache(ttl_seconds=10)
        puts = {0.0: "a", 15.0: "b", 40.0: "c"}
        for at, value in puts.items():
            cache.put(value, now=at)
            for offset, expected in ((0.0, value), (9.99, value), (10.0, None)):
                assert cache.get(now=at + offset) == expected

    def test_empty_listing_is_a_hit(self) -> None:
        cache = SnapshotCache(ttl_seconds=10)
        cache.put((), now=0.0)
        assert cache.get(now=5.0) == ()

    def test_repeated_gets_return_same_object(self) -> None:
        cache = SnapshotCache(ttl_seconds=10)
        listing = ("a", "b")
        cache.put(listing, now=0.0)
        assert all(cache.get(now=t) is listing for t in (0.0, 1.0, 9.0))


class TestSnapshotCacheClock:
    """Tests for the injected clock."""

    def test_uses_clock_when_now_omitted(self) -> None:
        clock = FakeClock(100.0)
        cache = SnapshotCache(ttl_seconds=60, clock=clock)
        cache.put("value")
        clock.advance(59.0)
        assert cache.get() == "value"
        assert cache.age() == 59.0
        clock.advance(1.0)
        assert cache.get() is None

    def test_now_reads_clock(self) -> None:
        cache = SnapshotCache(clock=FakeClock(42.0))
        assert cache.now() == 42.0

    def test_clear(self) -> None:
        cache = SnapshotCache(ttl_seconds=60)
        cache.put("value", now=0.0)
        cache.clear()
        assert cache.get(now=0.0) is None

