"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from src.api.ratelimit import rate_limit_middleware
from src.api.routes import router
from src.cache.ratelimit import SlidingWindowRateLimiter
from src.cache.redis import RedisCache, create_redis_client
from src.chat.llm import create_llm_client
from src.chat.service import ChatService
from src.config import get_settings
from src.logging_config import setup_logging
from src.scraper import build_scrape_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting webchat service")

    redis_client = await create_redis_client(settings.redis_url)
    cache = RedisCache(redis_client, default_ttl=settings.scrape_ttl_seconds)

    # One HTTP client shared by classification, plain fetches and search
    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    llm = create_llm_client(settings.llm_api_key, settings.llm_base_url, settings.llm_model)
    scraper = build_scrape_service(settings, cache, http_client)
    chat = ChatService(
        cache,
        scraper,
        llm,
        ttl=settings.chat_ttl_seconds,
        search_fallback=settings.chat_search_fallback,
    )

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.cache = cache
    app.state.scraper = scraper
    app.state.chat = chat
    app.state.rate_limiter = (
        SlidingWindowRateLimiter(
            redis_client,
            limit=settings.rate_limit_requests,
            window=settings.rate_limit_window_seconds,
        )
        if settings.rate_limit_enabled
        else None
    )

    logger.info(
        "webchat service ready",
        extra={
            "llm_model": settings.llm_model,
            "llm_base_url": settings.llm_base_url,
            "rate_limit_enabled": settings.rate_limit_enabled,
            "single_flight": settings.scrape_single_flight,
        },
    )

    yield

    # Cleanup
    logger.info("shutting down webchat service")
    await llm.aclose()
    await http_client.aclose()
    await redis_client.aclose()


app = FastAPI(title="Webchat Service", lifespan=lifespan)
app.middleware("http")(rate_limit_middleware)
app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
