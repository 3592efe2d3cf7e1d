"""Sliding-window rate limiter backed by a Redis sorted set."""

from __future__ import annotations

import logging
import math
import time
import uuid
from dataclasses import dataclass

import redis.asyncio as redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "ratelimit:"

# Trim, count and conditionally record in one step so concurrent hits
# cannot all see the same count. Returns {allowed, count, oldest_score}.
_HIT_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])

redis.call('ZREMRANGEBYSCORE', key, 0, now - window)
local count = redis.call('ZCARD', key)
local allowed = 0
if count < limit then
    redis.call('ZADD', key, now, ARGV[4])
    redis.call('EXPIRE', key, window)
    count = count + 1
    allowed = 1
end

local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
local oldest_score = ARGV[1]
if #oldest > 0 then
    oldest_score = oldest[2]
end
return {allowed, count, oldest_score}
"""


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset: int  # seconds until the oldest request leaves the window


class SlidingWindowRateLimiter:
    """Allows at most ``limit`` requests per identifier in any ``window`` seconds.

    Each accepted request is a member of ``ratelimit:<identifier>`` scored by
    its timestamp. Members older than the window are trimmed before counting.
    """

    def __init__(self, client: redis.Redis, limit: int = 10, window: int = 10) -> None:
        self._client = client
        self._limit = limit
        self._window = window
        self._hit_script = client.register_script(_HIT_SCRIPT)

    @property
    def limit(self) -> int:
        return self._limit

    async def hit(self, identifier: str) -> RateLimitDecision:
        now = time.time()
        member = f"{now}:{uuid.uuid4().hex[:8]}"
        allowed, count, oldest = await self._hit_script(
            keys=[f"{KEY_PREFIX}{identifier}"],
            args=[repr(now), self._window, self._limit, member],
        )
        reset = max(1, math.ceil(float(oldest) + self._window - now))

        if not allowed:
            logger.info(
                "rate limit exceeded",
                extra={"identifier": identifier, "count": count, "reset": reset},
            )
            return RateLimitDecision(allowed=False, limit=self._limit, remaining=0, reset=reset)

        return RateLimitDecision(
            allowed=True,
            limit=self._limit,
            remaining=max(0, self._limit - int(count)),
            reset=reset,
        )
