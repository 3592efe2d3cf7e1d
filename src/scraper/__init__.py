"""Web scraping package: render-method selection, fetching, extraction, search."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .classifier import RenderMethod, classify, needs_browser
from .extractor import extract_content
from .fetcher import BrowserFetcher, HttpFetcher, PageFetcher
from .models import Headings, ScrapedContent
from .search import DuckDuckGoResolver, SearchResolver, SearchResult, TavilyResolver
from .service import ScrapeService, is_url

if TYPE_CHECKING:
    import httpx

    from src.cache.redis import RedisCache
    from src.config import Settings

__all__ = [
    "BrowserFetcher",
    "DuckDuckGoResolver",
    "Headings",
    "HttpFetcher",
    "PageFetcher",
    "RenderMethod",
    "ScrapeService",
    "ScrapedContent",
    "SearchResolver",
    "SearchResult",
    "TavilyResolver",
    "build_resolver",
    "build_scrape_service",
    "classify",
    "extract_content",
    "is_url",
    "needs_browser",
]

logger = logging.getLogger(__name__)


def build_resolver(settings: Settings, client: httpx.AsyncClient) -> SearchResolver:
    """Tavily when an API key is configured, DuckDuckGo HTML otherwise."""
    if settings.tavily_api_key:
        logger.info("search resolver selected", extra={"resolver": "tavily"})
        return TavilyResolver(api_key=settings.tavily_api_key)
    logger.info("search resolver selected", extra={"resolver": "duckduckgo"})
    return DuckDuckGoResolver(
        client,
        search_url=settings.search_url,
        timeout=settings.http_timeout_seconds,
    )


def build_scrape_service(
    settings: Settings,
    cache: RedisCache,
    client: httpx.AsyncClient,
) -> ScrapeService:
    """Wire the scrape service from settings and shared clients."""
    return ScrapeService(
        cache=cache,
        client=client,
        http_fetcher=HttpFetcher(client, timeout=settings.http_timeout_seconds),
        browser_fetcher=BrowserFetcher(timeout=settings.browser_timeout_seconds),
        resolver=build_resolver(settings, client),
        ttl=settings.scrape_ttl_seconds,
        max_html_length=settings.max_html_length,
        classify_timeout=settings.http_timeout_seconds,
        single_flight=settings.scrape_single_flight,
    )
