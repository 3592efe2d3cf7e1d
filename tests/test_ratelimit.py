"""Sliding-window rate limiter and middleware tests."""

import asyncio
from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis
from fakeredis.aioredis import FakeRedis
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from src.api.ratelimit import client_identifier, rate_limit_middleware
from src.cache.ratelimit import KEY_PREFIX, SlidingWindowRateLimiter


@pytest.mark.asyncio
async def test_allows_up_to_limit(rate_limiter: SlidingWindowRateLimiter):
    decisions = [await rate_limiter.hit("1.2.3.4") for _ in range(3)]
    assert all(d.allowed for d in decisions)
    assert [d.remaining for d in decisions] == [2, 1, 0]


@pytest.mark.asyncio
async def test_blocks_over_limit(rate_limiter: SlidingWindowRateLimiter):
    for _ in range(3):
        await rate_limiter.hit("1.2.3.4")
    decision = await rate_limiter.hit("1.2.3.4")
    assert decision.allowed is False
    assert decision.remaining == 0
    assert 1 <= decision.reset <= 10


@pytest.mark.asyncio
async def test_concurrent_burst_admits_only_limit(rate_limiter: SlidingWindowRateLimiter):
    decisions = await asyncio.gather(*(rate_limiter.hit("5.6.7.8") for _ in range(10)))
    assert sum(d.allowed for d in decisions) == 3
    assert sorted(d.remaining for d in decisions if d.allowed) == [0, 1, 2]


@pytest.mark.asyncio
async def test_identifiers_are_independent(rate_limiter: SlidingWindowRateLimiter):
    for _ in range(3):
        await rate_limiter.hit("a")
    assert (await rate_limiter.hit("b")).allowed is True


@pytest.mark.asyncio
async def test_old_entries_leave_the_window(rate_limiter: SlidingWindowRateLimiter, redis_client):
    # three requests recorded well outside the 10s window
    await redis_client.zadd(f"{KEY_PREFIX}old", {"a": 1.0, "b": 2.0, "c": 3.0})
    assert (await rate_limiter.hit("old")).allowed is True


def _make_app(limiter) -> FastAPI:
    app = FastAPI()
    app.state.rate_limiter = limiter
    app.middleware("http")(rate_limit_middleware)

    @app.post("/api/chat")
    async def chat():
        return {"answer": "ok", "sources": ""}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def _limiter(limit: int) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(FakeRedis(decode_responses=True), limit=limit, window=10)


def test_middleware_sets_headers_then_rejects():
    headers = {"X-Forwarded-For": "9.9.9.9, 10.0.0.1"}
    with TestClient(_make_app(_limiter(2))) as client:
        first = client.post("/api/chat", headers=headers)
        client.post("/api/chat", headers=headers)
        blocked = client.post("/api/chat", headers=headers)

    assert first.status_code == 200
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert "X-RateLimit-Reset" in first.headers

    assert blocked.status_code == 429
    assert blocked.json()["error"] == "Rate limit exceeded. Please try again later"
    assert blocked.headers["Retry-After"] == str(blocked.json()["retryAfter"])


def test_middleware_skips_non_api_paths():
    with TestClient(_make_app(_limiter(1))) as client:
        responses = [client.get("/health") for _ in range(3)]
    assert all(r.status_code == 200 for r in responses)
    assert all("X-RateLimit-Limit" not in r.headers for r in responses)


def test_middleware_fails_open_on_redis_error():
    limiter = _limiter(1)
    limiter.hit = AsyncMock(side_effect=redis.ConnectionError("down"))
    with TestClient(_make_app(limiter)) as client:
        assert client.post("/api/chat").status_code == 200


def test_middleware_disabled_without_limiter():
    with TestClient(_make_app(None)) as client:
        resp = client.post("/api/chat")
    assert resp.status_code == 200
    assert "X-RateLimit-Limit" not in resp.headers


def test_client_identifier_prefers_forwarded_for():
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(b"x-forwarded-for", b"203.0.113.7, 10.0.0.1")],
        "client": ("127.0.0.1", 1234),
    }
    assert client_identifier(Request(scope)) == "203.0.113.7"
    scope["headers"] = []
    assert client_identifier(Request(scope)) == "127.0.0.1"
    scope["client"] = None
    assert client_identifier(Request(scope)) == "unknown"
