"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    llm_api_key: str = ""
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.3-70b-versatile"
    tavily_api_key: str = ""

    redis_url: str = "redis://localhost:6379"
    scrape_ttl_seconds: int = 7 * 24 * 3600
    chat_ttl_seconds: int = 3600
    max_html_length: int = 1_000_000

    search_url: str = "https://html.duckduckgo.com/html/"
    http_timeout_seconds: float = 10.0
    browser_timeout_seconds: float = 30.0
    scrape_single_flight: bool = True
    chat_search_fallback: bool = False

    rate_limit_enabled: bool = True
    rate_limit_requests: int = 10
    rate_limit_window_seconds: int = 10

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
