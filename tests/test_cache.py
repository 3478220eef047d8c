"""Tests for the Redis cache wrapper and cache key construction."""

import asyncio
import json

import pytest

from noor.cache import RedisCache, make_cache_key
from noor.config import RedisConfig

from .conftest import FakeRedis


class TestMakeCacheKey:
    """Cache keys must not depend on how the caller built its parameters."""

    def test_parameter_order_does_not_matter(self):
        """Test that equivalent parameter dicts produce one key."""
        first = make_cache_key("quran:ayah", {"reference": "2:255", "edition": "en.asad"})
        second = make_cache_key("quran:ayah", {"edition": "en.asad", "reference": "2:255"})

        assert first == second

    def test_none_values_are_dropped(self):
        """Test that unset optional parameters don't fragment the key space."""
        assert make_cache_key("quran:division", {"number": 1, "offset": None}) == \
            make_cache_key("quran:division", {"number": 1})

    def test_key_format(self):
        """Test the exact key layout: prefix, operation, compact sorted JSON."""
        key = make_cache_key("quran:ayah", {"reference": "2:255", "edition": "en.asad"}, prefix="noor")

        assert key == 'noor:quran:ayah:{"edition":"en.asad","reference":"2:255"}'

    def test_operation_without_params(self):
        """Test that parameterless operations use the bare operation name."""
        assert make_cache_key("quran:surahs") == "quran:surahs"
        assert make_cache_key("quran:surahs", {}) == "quran:surahs"
        assert make_cache_key("quran:surahs", {"edition": None}) == "quran:surahs"

    def test_different_values_produce_different_keys(self):
        """Test that keys distinguish parameter values and types of operation."""
        keys = {
            make_cache_key("quran:surah", {"number": 1}),
            make_cache_key("quran:surah", {"number": 2}),
            make_cache_key("quran:ayah", {"number": 1}),
        }

        assert len(keys) == 3

    def test_non_ascii_values(self):
        """Test that Arabic parameters are kept readable in the key."""
        key = make_cache_key("quran:search", {"keyword": "الله"})

        assert "الله" in key


@pytest.mark.asyncio
class TestRedisCacheOperations:
    """Test get/set against a reachable Redis."""

    async def test_set_then_get_round_trips_json(self, cache, fake_redis):
        """Test that values are stored as JSON and decoded on read."""
        value = {"number": 255, "text": "Allah! There is no deity...", "tags": ["a", "b"]}

        assert await cache.set("k", value) is True
        assert await cache.get("k") == value
        assert json.loads(fake_redis.store["k"]) == value

    async def test_set_with_ttl_uses_setex(self, cache, fake_redis):
        """Test that a TTL is passed through as the key's expiry."""
        await cache.set("k", [1, 2, 3], ttl=3600)

        assert fake_redis.ttls["k"] == 3600

    async def test_set_without_ttl_does_not_expire(self, cache, fake_redis):
        await cache.set("k", "v")

        assert "k" in fake_redis.store
        assert "k" not in fake_redis.ttls

    async def test_get_miss_returns_none(self, cache):
        assert await cache.get("missing") is None

    async def test_undecodable_value_is_a_miss(self, cache, fake_redis):
        """Test that corrupt cache entries are treated as misses."""
        fake_redis.store["k"] = "{not json"

        assert await cache.get("k") is None

    async def test_unserializable_value_is_not_stored(self, cache, fake_redis):
        assert await cache.set("k", {"value": object()}) is False
        assert "k" not in fake_redis.store

    async def test_make_key_uses_configured_prefix(self, cache):
        assert cache.make_key("quran:surah", {"number": 2}) == 'test:quran:surah:{"number":2}'

    async def test_ping(self, cache):
        assert await cache.ping() is True


@pytest.mark.asyncio
class TestRedisCacheDegradation:
    """The cache must never make an operation fail."""

    async def test_unreachable_redis_reads_as_miss(self, unavailable_cache):
        """Test that get returns a miss when Redis can't be reached."""
        assert await unavailable_cache.get("k") is None

    async def test_unreachable_redis_write_returns_false(self, unavailable_cache):
        """Test that set reports failure instead of raising."""
        assert await unavailable_cache.set("k", {"a": 1}, ttl=60) is False

    async def test_unreachable_redis_ping_is_false(self, unavailable_cache):
        assert await unavailable_cache.ping() is False

    async def test_errors_after_connecting_degrade_to_miss(self, cache, fake_redis):
        """Test that Redis going away mid-flight is also a miss / failed write."""
        await cache.set("k", "v")
        fake_redis.fail = True

        assert await cache.get("k") is None
        assert await cache.set("k", "w") is False

    async def test_failed_connect_is_not_retried_during_cooldown(self, redis_config):
        """Test that a failed connect isn't repeated on every request."""
        attempts = []

        def factory():
            attempts.append(1)
            return FakeRedis(fail=True)

        cache = RedisCache(config=redis_config, client_factory=factory)
        for _ in range(5):
            assert await cache.get("k") is None

        assert len(attempts) == 1


@pytest.mark.asyncio
class TestRedisCacheConnection:
    """Test the lazy, shared connection attempt."""

    async def test_connection_is_lazy(self, redis_config):
        """Test that nothing connects until the first operation."""
        attempts = []
        RedisCache(config=redis_config, client_factory=lambda: attempts.append(1) or FakeRedis())

        assert attempts == []

    async def test_concurrent_first_use_shares_one_connect(self, redis_config):
        """Test that concurrent early callers wait on the same connect attempt."""
        attempts = []

        class SlowPingRedis(FakeRedis):
            async def ping(self):
                await asyncio.sleep(0.05)
                return True

        def factory():
            attempts.append(1)
            return SlowPingRedis()

        cache = RedisCache(config=redis_config, client_factory=factory)
        results = await asyncio.gather(*(cache.set(f"k{i}", i) for i in range(10)))

        assert all(results)
        assert len(attempts) == 1

    async def test_slow_connect_times_out_to_miss(self):
        """Test that waiting on the connect attempt is bounded."""

        class HangingRedis(FakeRedis):
            async def ping(self):
                await asyncio.sleep(10)

        cache = RedisCache(
            config=RedisConfig(host="redis.test", connect_timeout=0.05),
            client_factory=HangingRedis,
        )

        assert await cache.get("k") is None
        assert await cache.set("k", "v") is False
        await cache.close()

    async def test_close_closes_client(self, cache, fake_redis):
        await cache.get("k")
        await cache.close()

        assert fake_redis.closed is True
