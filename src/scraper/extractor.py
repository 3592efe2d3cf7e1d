"""HTML → ScrapedContent extraction."""

from __future__ import annotations

from bs4 import BeautifulSoup

from .models import MAX_CONTENT_LENGTH, Headings, ScrapedContent
from .text import normalize_text

STRIP_TAGS = ("script", "style", "noscript", "header", "footer", "aside", "nav")

# Candidate main-content containers, in priority order
CONTENT_SELECTORS: tuple[str, ...] = (
    "article",
    "main",
    ".content",
    "#content",
    ".post-content",
    ".entry-content",
    ".article-body",
    ".post",
    "#main",
    '[role="main"]',
)


def _joined_text(soup: BeautifulSoup, selector: str) -> str:
    return normalize_text(" ".join(el.get_text(" ") for el in soup.select(selector)))


def _main_content(soup: BeautifulSoup) -> str:
    best = ""
    for selector in CONTENT_SELECTORS:
        text = _joined_text(soup, selector)
        if len(text) > len(best):
            best = text
    if best:
        return best
    root = soup.body or soup
    return normalize_text(root.get_text(" "))


def extract_content(markup: str, url: str) -> ScrapedContent:
    """Parse *markup* into a ScrapedContent record for *url*.

    Boilerplate containers are dropped before anything is read. The main
    content is the longest text among ``CONTENT_SELECTORS``; with no match
    the whole body is used.
    """
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(list(STRIP_TAGS)):
        tag.decompose()

    title = normalize_text(soup.title.get_text()) if soup.title else ""
    meta = soup.find("meta", attrs={"name": "description"})
    meta_description = normalize_text(meta.get("content", "")) if meta else ""

    return ScrapedContent(
        url=url,
        title=title,
        meta_description=meta_description,
        headings=Headings(h1=_joined_text(soup, "h1"), h2=_joined_text(soup, "h2")),
        content=_main_content(soup)[:MAX_CONTENT_LENGTH],
    )
