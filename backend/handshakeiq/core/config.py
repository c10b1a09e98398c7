from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # core
    ENV: str = "dev"
    API_PREFIX: str = "/api"

    # database & redis
    # Plain string so both postgresql:// and sqlite:// URLs are accepted
    DATABASE_URL: str = "sqlite:///./handshakeiq.db"
    # Search result cache; caching is skipped entirely when unset
    REDIS_URL: str | None = None

    # web search (Google Custom Search JSON API)
    GOOGLE_SEARCH_API_KEY: str | None = None
    GOOGLE_SEARCH_ENGINE_ID: str | None = None
    GOOGLE_SEARCH_BASE_URL: str = "https://www.googleapis.com/customsearch/v1"
    SEARCH_TIMEOUT_SECONDS: float = 15.0
    SEARCH_MAX_RESULTS: int = 10  # API max is 10 per request
    SEARCH_ENRICHMENT_ENABLED: bool = True
    SEARCH_ENRICHMENT_RESULTS: int = 3
    SEARCH_CACHE_TTL_SECONDS: int = 60 * 60 * 6

    # llm
    OPENROUTER_API_KEY: str | None = None
    OPENAI_API_KEY: str | None = None  # Required for intelligence reports (web_search tool)
    OPENAI_WEB_MODEL: str = "gpt-5"
    VISION_MODEL: str = "gpt-4.1-mini"
    LLM_TIMEOUT_SECONDS: float = 90.0
    # Hard cap on concurrent LLM calls per process
    LLM_MAX_CONCURRENCY: int = 4

    # calendar
    GOOGLE_CALENDAR_BASE_URL: str = "https://www.googleapis.com/calendar/v3"
    CALENDAR_TIMEOUT_SECONDS: float = 15.0

    # auth / security
    API_AUTH_KEY: str | None = None
    FRONTEND_ORIGIN: str | None = None
    # Explicit debug-only switch for wide-open CORS in non-prod envs
    CORS_ALLOW_ALL_ORIGINS: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
