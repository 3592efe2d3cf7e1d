"""Scrape service — cached fetch, extraction and query resolution."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar
from urllib.parse import urlparse

import httpx

from src.cache.redis import HTML_NAMESPACE, SCRAPE_NAMESPACE, RedisCache

from .classifier import RenderMethod, classify
from .extractor import extract_content
from .fetcher import PageFetcher
from .models import ScrapedContent
from .search import SearchResolver
from .singleflight import SingleFlight

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScrapeError(Exception):
    """Raised inside the pipeline when a page yields nothing usable."""


def is_url(value: str) -> bool:
    """Return ``True`` for a well-formed absolute http(s) URL."""
    value = value.strip()
    if not value or any(ch.isspace() for ch in value):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ScrapeService:
    """Fetches pages through the Redis cache and turns them into ScrapedContent.

    Raw markup and structured records live in separate cache namespaces, both
    keyed by URL. Only successful results are written, so a failing URL is
    attempted from scratch on every request.
    """

    def __init__(
        self,
        cache: RedisCache,
        client: httpx.AsyncClient,
        http_fetcher: PageFetcher,
        browser_fetcher: PageFetcher,
        resolver: SearchResolver,
        *,
        ttl: int = 7 * 24 * 3600,
        max_html_length: int = 1_000_000,
        classify_timeout: float = 10.0,
        single_flight: bool = True,
    ) -> None:
        self._cache = cache
        self._client = client
        self._fetchers: dict[RenderMethod, PageFetcher] = {
            RenderMethod.HTTP: http_fetcher,
            RenderMethod.BROWSER: browser_fetcher,
        }
        self._resolver = resolver
        self._ttl = ttl
        self._max_html_length = max_html_length
        self._classify_timeout = classify_timeout
        self._flight = SingleFlight() if single_flight else None

    async def _dedup(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        if self._flight is None:
            return await fn()
        return await self._flight.do(key, fn)

    async def get_raw_html(self, url: str) -> str:
        """Return raw markup for *url*, from cache when possible.

        Empty markup means every fetch strategy failed; it is never cached.
        """
        cached = await self._cache.get_text(HTML_NAMESPACE, url)
        if cached is not None:
            return cached
        return await self._dedup(f"{HTML_NAMESPACE}:{url}", lambda: self._fetch_raw_html(url))

    async def _fetch_raw_html(self, url: str) -> str:
        method = await classify(url, self._client, timeout=self._classify_timeout)
        logger.info("fetching page", extra={"url": url, "method": method.value})
        html = await self._fetchers[method].fetch(url)
        if html:
            await self._cache.set_text(
                HTML_NAMESPACE, url, html[: self._max_html_length], ttl=self._ttl
            )
        return html

    async def scrape_url(self, url: str) -> ScrapedContent:
        """Return the structured record for *url*; failures land in ``error``."""
        cached = await self._cache.get_model(SCRAPE_NAMESPACE, url, ScrapedContent)
        if cached is not None:
            return cached
        return await self._dedup(f"{SCRAPE_NAMESPACE}:{url}", lambda: self._scrape_fresh(url))

    async def _scrape_fresh(self, url: str) -> ScrapedContent:
        try:
            html = await self.get_raw_html(url)
            if not html:
                raise ScrapeError("No content could be retrieved from the URL")
            content = extract_content(html, url)
            if not content.content:
                raise ScrapeError("No content could be extracted from the page")
        except Exception as exc:
            logger.warning("scrape failed", extra={"url": url}, exc_info=True)
            return ScrapedContent.failed(url, f"Failed to scrape URL: {exc}")

        await self._cache.set_model(SCRAPE_NAMESPACE, url, content, ttl=self._ttl)
        logger.info(
            "page scraped",
            extra={"url": url, "title": content.title[:80], "content_length": len(content.content)},
        )
        return content

    async def scrape_and_search(self, query: str) -> ScrapedContent:
        """Scrape *query* directly when it is a URL, else scrape its top search hit."""
        query = query.strip()
        if is_url(query):
            return await self.scrape_url(query)

        url = await self._resolver.resolve_top_result(query)
        if not url:
            return ScrapedContent.no_results()
        logger.debug("query resolved", extra={"query": query[:100], "url": url})
        return await self.scrape_url(url)
