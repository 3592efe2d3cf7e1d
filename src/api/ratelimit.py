"""Rate-limit middleware for the /api routes."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

import redis.asyncio as redis
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from src.cache.ratelimit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

RATE_LIMITED_PREFIX = "/api"


def client_identifier(request: Request) -> str:
    """First X-Forwarded-For entry, else the peer address, else ``"unknown"``."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def rate_limit_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    limiter: SlidingWindowRateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None or not request.url.path.startswith(RATE_LIMITED_PREFIX):
        return await call_next(request)

    identifier = client_identifier(request)
    try:
        decision = await limiter.hit(identifier)
    except redis.RedisError:
        logger.warning("rate limiter unavailable, allowing request", extra={"identifier": identifier}, exc_info=True)
        return await call_next(request)

    if not decision.allowed:
        return JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded. Please try again later",
                "retryAfter": decision.reset,
            },
            headers={"Retry-After": str(decision.reset)},
        )

    response = await call_next(request)
    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    response.headers["X-RateLimit-Reset"] = str(decision.reset)
    return response
