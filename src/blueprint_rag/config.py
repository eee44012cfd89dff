from __future__ import annotations

from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "Blueprint RAG"
    env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000


class DatabaseConfig(BaseModel):
    """Persisted document store configuration values."""

    # Default to docker-compose service credentials
    url: str = "postgresql+psycopg://user:password@db:5432/blueprint_rag"
    echo: bool = False
    # When disabled the service runs on the in-memory seed corpus only
    enabled: bool = True


class SearchConfig(BaseModel):
    """Retrieval tuning values."""

    cache_ttl_seconds: float = 300.0
    default_limit: int = 5
    max_terms: int = 10
    snippet_max_length: int = 200
    snippet_window_words: int = 25
    # Upper bound on a single persisted-store query before falling back to memory results
    persisted_timeout_seconds: float = 2.0
    sync_interval_seconds: int = 30


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="BLUEPRINT_RAG_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    database: DatabaseConfig = DatabaseConfig()
    search: SearchConfig = SearchConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    return Settings()  # type: ignore[call-arg]
