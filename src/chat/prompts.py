"""Prompt templates for the chat completion call."""

SYSTEM_PROMPT = """\
You are a helpful assistant that answers user queries using real, up-to-date \
sources. Use the sources below to answer the user's query and cite them when \
relevant. If the sources do not cover the question, or none are given, answer \
from your own knowledge and say so.
"""

SOURCE_TEMPLATE = """\
Source [1]: {url}
Title: {title}
Description: {meta_description}
Headings: {headings}

{content}
"""


def format_source(url: str, title: str, meta_description: str, headings: str, content: str) -> str:
    return SOURCE_TEMPLATE.format(
        url=url,
        title=title or "(untitled)",
        meta_description=meta_description or "(none)",
        headings=headings or "(none)",
        content=content,
    )


def format_system_prompt(context: str = "") -> str:
    """Return the system prompt, with the scraped source appended when present."""
    if not context:
        return SYSTEM_PROMPT
    return f"{SYSTEM_PROMPT}\n{context}"
