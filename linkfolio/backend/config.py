"""
Configuration and settings for the backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Storage backend selection
    use_document_store: bool = Field(
        default=False, validation_alias="LINKFOLIO_USE_DOCUMENT_STORE"
    )
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017/linkedin-website-generator"
    )
    mongodb_database: Optional[str] = Field(default=None)
    document_store_timeout_seconds: float = Field(default=5.0)

    # LLM / Gemini
    gemini_api_key: Optional[str] = Field(default=None)
    gemini_model: str = Field(default="gemini-2.5-flash")
    llm_timeout_seconds: float = Field(default=60.0)

    # Profile source. Without a URL the deterministic sample fetcher is used.
    profile_api_url: Optional[str] = Field(default=None)
    profile_fetch_timeout_seconds: float = Field(default=30.0)
    mock_fetch_delay_seconds: float = Field(default=1.0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
