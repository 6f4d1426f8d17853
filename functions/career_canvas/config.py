"""
Configuration and settings for the Career Canvas API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.openai_api import DEFAULT_CHAT_MODEL, DEFAULT_COMPLETION_MODEL


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    port: int = Field(default=3001)

    # Hosting environment. Azure App Service sets WEBSITE_INSTANCE_ID.
    node_env: str = Field(default="development")
    website_instance_id: Optional[str] = Field(default=None)

    # Database (any SQLAlchemy URL; unset means in-memory)
    database_url: Optional[str] = Field(default=None)

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None)
    openai_completion_model: str = Field(default=DEFAULT_COMPLETION_MODEL)
    openai_chat_model: str = Field(default=DEFAULT_CHAT_MODEL)

    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def is_production(self) -> bool:
        return self.node_env == "production" or bool(self.website_instance_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
