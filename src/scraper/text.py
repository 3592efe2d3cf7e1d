"""Whitespace normalization for extracted text."""

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Collapse runs of whitespace and newlines into single spaces."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()
