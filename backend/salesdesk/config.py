"""Application configuration helpers."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]
MIN_TARGET_FACTOR = 1.05
MAX_TARGET_FACTOR = 1.2


class Settings(BaseSettings):
    """Centralized configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    app_name: str = "Salesdesk Data Store"
    environment: str = "dev"

    # Durable key-value medium (fallback to local sqlite for dev/testing)
    database_url: Optional[str] = None
    sqlite_filename: str = "salesdesk.db"
    storage_origin: str = "local"

    # Query behavior
    default_page_size: int = Field(10, ge=1)

    # Analytics
    revenue_target_factor: float = Field(1.15, ge=MIN_TARGET_FACTOR, le=MAX_TARGET_FACTOR)
    timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    log_level_sql: str = "WARNING"

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{(BASE_DIR / self.sqlite_filename).as_posix()}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
