"""
Unit Tests for CachedReferenceDataStore
=======================================

The Redis client is an AsyncMock; the real round-trip is covered by
tests/integration/test_reference_cache_redis.py.
"""

import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from starfall.core.cache.reference_cache import CachedReferenceDataStore
from tests.conftest import FakeReferenceStore


@pytest.fixture
def redis_client(mocker):
    client = mocker.AsyncMock()
    client.mget.return_value = [None, None, None]
    return client


@pytest.fixture
def inner():
    return FakeReferenceStore()


@pytest.fixture
def cache(inner, redis_client):
    return CachedReferenceDataStore(inner, redis_client, ttl_seconds=60)


KEYS = ["Planets", "Enemies", "Levels"]


@pytest.mark.asyncio
class TestCachedReferenceDataStore:
    """Test read-through caching and degradation."""

    async def test_miss_fetches_and_stores(self, cache, inner, redis_client):
        documents = await cache.get_title_data(KEYS)

        assert set(documents) == set(KEYS)
        assert inner.calls == [("get_title_data", KEYS)]
        assert redis_client.setex.await_count == 3
        key, ttl, value = redis_client.setex.await_args_list[0].args
        assert key == "starfall:v1:titledata:Planets"
        assert ttl == 60
        assert json.loads(value) == documents["Planets"]
        assert cache.misses == 3

    async def test_partial_hit_fetches_only_missing(self, cache, inner, redis_client):
        redis_client.mget.return_value = [json.dumps({"planets": []}), None, None]

        documents = await cache.get_title_data(KEYS)

        assert documents["Planets"] == {"planets": []}
        assert inner.calls == [("get_title_data", ["Enemies", "Levels"])]
        assert cache.hits == 1
        assert cache.misses == 2

    async def test_full_hit_skips_inner_store(self, cache, inner, redis_client):
        redis_client.mget.return_value = [json.dumps({"k": i}) for i in range(3)]

        await cache.get_title_data(KEYS)

        assert inner.calls == []
        redis_client.setex.assert_not_awaited()

    async def test_redis_down_falls_back(self, cache, inner, redis_client):
        """A Redis failure never fails the request."""
        redis_client.mget.side_effect = RedisConnectionError("refused")
        redis_client.setex.side_effect = RedisConnectionError("refused")

        documents = await cache.get_title_data(KEYS)

        assert set(documents) == set(KEYS)
        assert inner.calls == [("get_title_data", KEYS)]

    async def test_undecodable_entry_refetched(self, cache, inner, redis_client):
        redis_client.mget.return_value = ["{broken", None, None]

        await cache.get_title_data(KEYS)

        assert inner.calls == [("get_title_data", KEYS)]

    async def test_evaluate_bypasses_cache(self, cache, inner, redis_client):
        result = await cache.evaluate_random_result_table("RatLoot")

        assert result == "RatTail"
        redis_client.mget.assert_not_awaited()

    async def test_invalidate_deletes_keys(self, cache, redis_client):
        await cache.invalidate(["Planets"])

        redis_client.delete.assert_awaited_once_with("starfall:v1:titledata:Planets")

    async def test_close(self, cache, redis_client):
        await cache.close()

        redis_client.aclose.assert_awaited_once()
