"""Chat service — optional page context, LLM answer, answer cache."""

from __future__ import annotations

import hashlib
import logging
import re

from src.api.schemas import NO_SOURCES, ChatResponse
from src.cache.redis import CHAT_NAMESPACE, RedisCache
from src.chat.llm import LLMClient
from src.chat.prompts import format_source, format_system_prompt
from src.scraper.models import ScrapedContent
from src.scraper.service import ScrapeService

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"https?://[^\s<>\"']+")
_TRAILING_PUNCT = ".,;:!?)]}"


def extract_url(query: str) -> str | None:
    """Return the first http(s) URL mentioned in *query*, if any."""
    match = _URL_RE.search(query)
    if match is None:
        return None
    url = match.group(0)
    while url and url[-1] in _TRAILING_PUNCT:
        # keep a closing paren that pairs with one inside the URL
        if url[-1] == ")" and url.count("(") >= url.count(")"):
            break
        url = url[:-1]
    return url or None


def cache_key_for(query: str, url: str | None) -> str:
    """The URL when present, else a stable hash of the query text."""
    if url:
        return url
    return hashlib.sha256(query.encode("utf-8")).hexdigest()


def _context_from(page: ScrapedContent) -> str:
    headings = " ".join(h for h in (page.headings.h1, page.headings.h2) if h)
    return format_source(
        url=page.url,
        title=page.title,
        meta_description=page.meta_description,
        headings=headings,
        content=page.content,
    )


class ChatService:
    """Answers a user query, scraping a referenced page for context."""

    def __init__(
        self,
        cache: RedisCache,
        scraper: ScrapeService,
        llm: LLMClient,
        *,
        ttl: int = 3600,
        search_fallback: bool = False,
    ) -> None:
        self._cache = cache
        self._scraper = scraper
        self._llm = llm
        self._ttl = ttl
        self._search_fallback = search_fallback

    async def answer(self, query: str) -> ChatResponse:
        url = extract_url(query)
        key = cache_key_for(query, url)

        cached = await self._cache.get_model(CHAT_NAMESPACE, key, ChatResponse)
        if cached is not None:
            logger.info("chat answer served from cache", extra={"key": key[:100]})
            return cached

        page = await self._find_page(query, url)
        context = ""
        sources = NO_SOURCES
        if page is not None and page.ok and page.content:
            context = _context_from(page)
            sources = page.url
        elif page is not None:
            logger.info(
                "answering without page context",
                extra={"url": page.url, "error": page.error},
            )

        answer = await self._llm.complete(format_system_prompt(context), query)
        response = ChatResponse(answer=answer, sources=sources)
        # a failed scrape must be retried on the next request
        if page is None or page.ok:
            await self._cache.set_model(CHAT_NAMESPACE, key, response, ttl=self._ttl)
        logger.info(
            "chat answered",
            extra={"key": key[:100], "sources": sources, "context_chars": len(context)},
        )
        return response

    async def _find_page(self, query: str, url: str | None) -> ScrapedContent | None:
        if url:
            return await self._scraper.scrape_url(url)
        if self._search_fallback:
            return await self._scraper.scrape_and_search(query)
        return None
