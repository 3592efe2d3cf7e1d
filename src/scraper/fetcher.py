"""Page fetchers — plain HTTP and headless-browser strategies."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from playwright.async_api import async_playwright

from .user_agents import random_user_agent

logger = logging.getLogger(__name__)


class PageFetcher(Protocol):
    """Protocol for page fetchers. Implementations return ``""`` instead of raising."""

    async def fetch(self, url: str) -> str: ...


class HttpFetcher:
    """Fetches raw markup with a single GET request."""

    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def fetch(self, url: str) -> str:
        try:
            resp = await self._client.get(
                url,
                headers={"User-Agent": random_user_agent()},
                timeout=self._timeout,
                follow_redirects=True,
            )
            resp.raise_for_status()
        except httpx.HTTPError:
            logger.warning("http fetch failed", extra={"url": url}, exc_info=True)
            return ""
        logger.debug("http fetch complete", extra={"url": url, "length": len(resp.text)})
        return resp.text


class BrowserFetcher:
    """Renders a page in a headless Chromium launched for this call only."""

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout_ms = timeout * 1000

    async def fetch(self, url: str) -> str:
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=True)
                try:
                    context = await browser.new_context(user_agent=random_user_agent())
                    page = await context.new_page()
                    await page.goto(url, wait_until="networkidle", timeout=self._timeout_ms)
                    html = await page.content()
                finally:
                    await browser.close()
        except Exception:
            logger.warning("browser fetch failed", extra={"url": url}, exc_info=True)
            return ""
        logger.debug("browser fetch complete", extra={"url": url, "length": len(html)})
        return html
