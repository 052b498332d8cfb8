"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: a local SQLite fallback
      store works out of the box
    - anthropic_max_retries defaults to 0: one oracle request per submission
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Local fallback store
    database_url: str = "sqlite+aiosqlite:///./thaiat.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres URLs come as postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Anthropic (reading oracle)
    anthropic_api_key: str = ""
    anthropic_max_retries: int = 0
    anthropic_timeout_seconds: int = 120
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 30_000

    # Reading
    reading_model: str = "claude-sonnet-4-5"
    reading_max_tokens: int = 8000
    follow_up_max_tokens: int = 1024
    reading_temperature: float = 0.6

    # Remote config store (Firebase Realtime Database style JSON document)
    config_store_url: str = ""
    config_store_timeout_seconds: float = 10.0

    # Admin
    admin_token: str = ""

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
