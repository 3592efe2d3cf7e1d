"""Data models for the scraper package."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_CONTENT_LENGTH = 40_000
NO_RESULTS_ERROR = "No results found for the query"


class Headings(BaseModel):
    h1: str = ""
    h2: str = ""


class ScrapedContent(BaseModel):
    """Structured record extracted from a single web page.

    Either ``error`` is ``None`` and the text fields carry the page, or
    ``error`` explains the failure and every text field except ``url`` is
    empty.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str = ""
    title: str = ""
    meta_description: str = Field(default="", alias="metaDescription")
    headings: Headings = Headings()
    content: str = ""
    error: str | None = None

    @field_validator("content")
    @classmethod
    def _cap_content(cls, value: str) -> str:
        return value[:MAX_CONTENT_LENGTH]

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, url: str, error: str) -> ScrapedContent:
        return cls(url=url, error=error)

    @classmethod
    def no_results(cls) -> ScrapedContent:
        return cls(error=NO_RESULTS_ERROR)
