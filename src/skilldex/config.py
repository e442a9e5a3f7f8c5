"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SKILLDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # CORS
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Search index
    index_backend: Literal["typesense", "memory"] = "memory"
    typesense_url: str = "http://localhost:8108"
    typesense_api_key: str = ""
    typesense_timeout_seconds: float = 10.0
    collection_name: str = "skill_resources"

    # Sync
    default_cache_ttl_seconds: int = 4 * 60 * 60
    local_source_prefix: str = "local:"
    sync_concurrency: int = Field(default=4, ge=1)

    # Indexing
    description_max_chars: int = 200
    default_quality_score: int = 50

    # Discovery
    default_per_domain: int = Field(default=10, ge=1, le=50)
    default_segment_limit: int = 25

    # Static configuration ("package.module:ATTRIBUTE")
    skills_module: str | None = None
    routes_module: str | None = None

    # Per-exchange unlock sessions
    session_cache_size: int = 1000
    session_ttl_seconds: int = 3600

    # GitHub API (optional)
    github_token: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
