"""
Configuration and settings for the project backup service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

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

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(
        default=None, validation_alias="DATABASE_URL"
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="PROJECT_BACKUP_USE_IN_MEMORY_BACKENDS"
    )

    # Defaults applied when a save request omits them
    default_backup_type: str = Field(default="AUTO")
    default_backup_source: str = Field(default="자동 백업")

    log_level: str = Field(default="INFO", validation_alias="PROJECT_BACKUP_LOG_LEVEL")

    # Servers
    host: str = Field(default="0.0.0.0", validation_alias="PROJECT_BACKUP_HOST")
    port: int = Field(default=8000, validation_alias="PROJECT_BACKUP_PORT")
    mock_host: str = Field(default="127.0.0.1", validation_alias="PROJECT_BACKUP_MOCK_HOST")
    mock_port: int = Field(default=5174, validation_alias="PROJECT_BACKUP_MOCK_PORT")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
