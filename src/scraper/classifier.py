"""Decides whether a page needs a headless browser to render its content."""

from __future__ import annotations

import logging
from enum import Enum

import httpx

from .user_agents import random_user_agent

logger = logging.getLogger(__name__)


class RenderMethod(str, Enum):
    HTTP = "http"
    BROWSER = "browser"


# Substrings that indicate the visible content is produced client-side
CSR_INDICATORS: tuple[str, ...] = (
    # global state markers
    "__NEXT_DATA__",
    "window.__NUXT__",
    "window.__INITIAL_STATE__",
    "window.__APOLLO_STATE__",
    # bundler paths
    "/_next/static",
    "/static/js/main.",
    "webpackJsonp",
    # framework DOM attributes
    "data-reactroot",
    "data-reactid",
    "ng-version",
    "ng-app",
    "data-v-",
    # empty mount points and inline bootstraps
    '<div id="root"></div>',
    '<div id="app"></div>',
    "<script>window.",
)


def needs_browser(markup: str) -> bool:
    """Return ``True`` if *markup* carries any client-side rendering indicator."""
    return any(indicator in markup for indicator in CSR_INDICATORS)


async def classify(
    url: str,
    client: httpx.AsyncClient,
    timeout: float = 10.0,
) -> RenderMethod:
    """Fetch *url* once and pick the render method for it.

    Any fetch failure selects ``BROWSER`` so the more capable path gets a try.
    """
    try:
        resp = await client.get(
            url,
            headers={"User-Agent": random_user_agent()},
            timeout=timeout,
            follow_redirects=True,
        )
        resp.raise_for_status()
    except httpx.HTTPError:
        logger.warning("classification fetch failed, defaulting to browser", extra={"url": url}, exc_info=True)
        return RenderMethod.BROWSER

    method = RenderMethod.BROWSER if needs_browser(resp.text) else RenderMethod.HTTP
    logger.debug("render method classified", extra={"url": url, "method": method.value})
    return method
