"""Application configuration managed via environment variables."""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "DailyStride Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://dailystride@localhost:5432/dailystride"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "dailystride"
    openai_api_key: str | None = None
    content_model: str = "gpt-4o-mini"
    content_temperature: float = 0.6
    content_timeout_seconds: float = 20.0
    content_max_retries: int = 1
    planning_mode: Literal["adaptive", "legacy"] = "adaptive"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
