"""Fixtures — mock Redis, cache, rate limiter."""

import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from src.cache.ratelimit import SlidingWindowRateLimiter
from src.cache.redis import RedisCache


@pytest_asyncio.fixture
async def redis_client():
    client = FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def redis_cache(redis_client):
    """RedisCache backed by an in-memory FakeRedis instance."""
    return RedisCache(redis_client, default_ttl=3600)


@pytest_asyncio.fixture
async def rate_limiter(redis_client):
    return SlidingWindowRateLimiter(redis_client, limit=3, window=10)
