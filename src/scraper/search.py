"""Search resolvers — turn a free-text query into candidate URLs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import parse_qs, urlparse

import httpx
from bs4 import BeautifulSoup
from tavily import AsyncTavilyClient

from .user_agents import random_user_agent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    url: str
    title: str
    snippet: str = ""


class SearchResolver(Protocol):
    """Protocol for search backends. Failures yield empty results, never raise."""

    async def search(self, query: str, max_results: int = 5) -> list[SearchResult]: ...

    async def resolve_top_result(self, query: str) -> str | None: ...


def _first_url(query: str, results: list[SearchResult]) -> str | None:
    if not results:
        logger.info("no search results", extra={"query": query[:100]})
        return None
    return results[0].url


def _unwrap_redirect(href: str, base_host: str) -> str | None:
    """Resolve a result href to the target URL, unwrapping ``/l/?uddg=`` links."""
    if href.startswith("//"):
        href = f"https:{href}"
    elif href.startswith("/"):
        href = f"https://{base_host}{href}"
    parsed = urlparse(href)
    if parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if target:
            href = target[0]
            parsed = urlparse(href)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return href


def parse_duckduckgo_results(markup: str, base_host: str = "duckduckgo.com") -> list[SearchResult]:
    """Extract organic results from a DuckDuckGo HTML results page."""
    soup = BeautifulSoup(markup, "html.parser")
    results: list[SearchResult] = []
    for block in soup.select("div.result"):
        if "result--ad" in (block.get("class") or []):
            continue
        link = block.select_one("a.result__a")
        if link is None or not link.get("href"):
            continue
        url = _unwrap_redirect(link["href"], base_host)
        if url is None:
            continue
        host = (urlparse(url).hostname or "").lower()
        # links back into the search engine itself
        if host == base_host or host.endswith(f".{base_host}"):
            continue
        snippet = block.select_one(".result__snippet")
        results.append(
            SearchResult(
                url=url,
                title=link.get_text(" ", strip=True),
                snippet=snippet.get_text(" ", strip=True) if snippet else "",
            )
        )
    return results


class DuckDuckGoResolver:
    """Scrapes DuckDuckGo's HTML endpoint; no API key, no stable contract."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        search_url: str = "https://html.duckduckgo.com/html/",
        timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._search_url = search_url
        self._timeout = timeout
        host = (urlparse(search_url).hostname or "duckduckgo.com").lower()
        self._base_host = host.removeprefix("html.").removeprefix("www.")

    async def search(self, query: str, max_results: int = 5) -> list[SearchResult]:
        logger.debug("searching", extra={"query": query[:100], "max_results": max_results})
        try:
            resp = await self._client.get(
                self._search_url,
                params={"q": query},
                headers={"User-Agent": random_user_agent()},
                timeout=self._timeout,
                follow_redirects=True,
            )
            resp.raise_for_status()
        except httpx.HTTPError:
            logger.warning("search failed", extra={"query": query[:100]}, exc_info=True)
            return []

        results = parse_duckduckgo_results(resp.text, self._base_host)[:max_results]
        logger.debug("search results received", extra={"query": query[:100], "result_count": len(results)})
        return results

    async def resolve_top_result(self, query: str) -> str | None:
        return _first_url(query, await self.search(query, max_results=1))


class TavilyResolver:
    """Search via the Tavily API."""

    def __init__(self, api_key: str) -> None:
        self._client = AsyncTavilyClient(api_key=api_key)

    async def search(self, query: str, max_results: int = 5) -> list[SearchResult]:
        logger.debug("searching", extra={"query": query[:100], "max_results": max_results})
        try:
            response = await self._client.search(
                query=query,
                max_results=max_results,
                include_answer=False,
            )
        except Exception:
            logger.warning("search failed", extra={"query": query[:100]}, exc_info=True)
            return []

        results = [
            SearchResult(
                url=item.get("url", ""),
                title=item.get("title", ""),
                snippet=item.get("content", ""),
            )
            for item in response.get("results", [])
            if item.get("url")
        ]
        logger.debug("search results received", extra={"query": query[:100], "result_count": len(results)})
        return results

    async def resolve_top_result(self, query: str) -> str | None:
        return _first_url(query, await self.search(query, max_results=1))
