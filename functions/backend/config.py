"""
Configuration and settings for the site backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import SIGNED_URL_EXPIRES_SECONDS


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    cors_origins: str = Field(default="", env="CORS_ORIGINS")

    # Relational data (Postgres behind the hosted platform)
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")

    # Hosted auth
    supabase_url: Optional[str] = Field(default=None, env="SUPABASE_URL")
    supabase_anon_key: Optional[str] = Field(default=None, env="SUPABASE_ANON_KEY")

    # S3-compatible object storage
    storage_endpoint: Optional[str] = Field(default=None, env="STORAGE_ENDPOINT")
    storage_region: Optional[str] = Field(default=None, env="STORAGE_REGION")
    storage_bucket: Optional[str] = Field(default=None, env="STORAGE_BUCKET")
    storage_access_key_id: Optional[str] = Field(
        default=None, env="STORAGE_ACCESS_KEY_ID"
    )
    storage_secret_access_key: Optional[str] = Field(
        default=None, env="STORAGE_SECRET_ACCESS_KEY"
    )
    storage_public_base_url: Optional[str] = Field(
        default=None, env="STORAGE_PUBLIC_BASE_URL"
    )
    signed_url_expires_seconds: int = Field(default=SIGNED_URL_EXPIRES_SECONDS)

    # Auth-state pub/sub (Redis)
    redis_url: Optional[str] = Field(default=None, env="REDIS_URL")
    auth_events_channel: str = Field(default="site:auth-events")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, env="USE_IN_MEMORY_BACKENDS"
    )

    def get_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
