"""
Application configuration using Pydantic Settings.

Centralizes all environment variables and app settings.
Using Pydantic BaseSettings gives us validation and type safety for config.
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    All sensitive/configurable values should live here.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars not defined here
    )

    # Application
    app_name: str = "Podcast Studio API"
    debug: bool = False

    # MongoDB - Motor (async driver) connection string
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "podcast_studio_db"

    # Supabase JWT validation - must match Dashboard → Project Settings → API → JWT Secret
    supabase_url: str = "https://your-project.supabase.co"
    supabase_jwt_secret: Optional[str] = None
    # Browser clients send the access token as a cookie instead of a bearer header
    auth_cookie_name: str = "sb-access-token"

    @field_validator("supabase_jwt_secret", mode="before")
    @classmethod
    def strip_jwt_secret(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not isinstance(v, str):
            return v
        return v.strip() or None

    # Blob storage - local directory, one sub-directory per bucket
    storage_dir: str = "storage"
    public_base_url: str = "http://localhost:8000/storage"
    documents_bucket: str = "documents"
    podcasts_bucket: str = "podcasts"
    max_upload_size_mb: int = 10

    # LLM - Groq (get key at https://console.groq.com)
    groq_api_key: Optional[str] = None
    llm_model: str = "llama-3.3-70b-versatile"

    # Failed podcast generations are deleted unless this is set
    keep_failed_podcasts: bool = False


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance.
    Using lru_cache avoids re-reading .env on every request.
    """
    return Settings()
