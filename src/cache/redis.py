"""Redis client — namespaced get/set with TTL."""

from __future__ import annotations

import logging
from typing import TypeVar

import redis.asyncio as redis
from pydantic import BaseModel, ValidationError
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

logger = logging.getLogger(__name__)

HTML_NAMESPACE = "html"
SCRAPE_NAMESPACE = "scrape"
CHAT_NAMESPACE = "chat"

ModelT = TypeVar("ModelT", bound=BaseModel)


def make_key(namespace: str, key: str) -> str:
    return f"{namespace}:{key}"


class RedisCache:
    """Thin async wrapper around Redis for caching scraped pages and answers.

    Values are UTF-8 strings; pydantic models are stored as their JSON dump.
    Redis errors never escape: reads degrade to a miss, writes return ``False``.
    """

    def __init__(self, client: redis.Redis, default_ttl: int = 3600) -> None:
        self._client = client
        self._default_ttl = default_ttl

    async def get_text(self, namespace: str, key: str) -> str | None:
        """Return the cached string, or ``None`` on miss / error."""
        try:
            raw = await self._client.get(make_key(namespace, key))
        except redis.RedisError:
            logger.warning("cache get failed", extra={"namespace": namespace, "key": key}, exc_info=True)
            return None
        if raw is None:
            logger.debug("cache miss", extra={"namespace": namespace, "key": key})
            return None
        logger.debug("cache hit", extra={"namespace": namespace, "key": key})
        return raw

    async def set_text(
        self, namespace: str, key: str, value: str, ttl: int | None = None
    ) -> bool:
        """Store *value* with a TTL. Returns ``False`` on error."""
        effective_ttl = ttl if ttl is not None else self._default_ttl
        try:
            await self._client.set(make_key(namespace, key), value, ex=effective_ttl)
        except redis.RedisError:
            logger.warning("cache set failed", extra={"namespace": namespace, "key": key}, exc_info=True)
            return False
        logger.debug(
            "cache set",
            extra={"namespace": namespace, "key": key, "ttl": effective_ttl, "size": len(value)},
        )
        return True

    async def get_model(
        self, namespace: str, key: str, model: type[ModelT]
    ) -> ModelT | None:
        """Return a cached pydantic model, or ``None`` on miss / error / bad payload."""
        raw = await self.get_text(namespace, key)
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError:
            logger.warning(
                "cached payload invalid, ignoring",
                extra={"namespace": namespace, "key": key},
                exc_info=True,
            )
            return None

    async def set_model(
        self, namespace: str, key: str, value: BaseModel, ttl: int | None = None
    ) -> bool:
        return await self.set_text(namespace, key, value.model_dump_json(by_alias=True), ttl=ttl)

    async def delete(self, namespace: str, key: str) -> bool:
        try:
            removed = await self._client.delete(make_key(namespace, key))
        except redis.RedisError:
            logger.warning("cache delete failed", extra={"namespace": namespace, "key": key}, exc_info=True)
            return False
        return bool(removed)


async def create_redis_client(redis_url: str) -> redis.Redis:
    # Strip credentials for logging (everything before @ if present)
    safe_url = redis_url.split("@")[-1] if "@" in redis_url else redis_url
    logger.info("connecting to redis", extra={"redis_url": safe_url})
    retry = Retry(ExponentialBackoff(), retries=3)
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
        retry=retry,
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )
