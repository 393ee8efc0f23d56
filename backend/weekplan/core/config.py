"""Application configuration managed via environment variables."""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Weekplan Backend"
    debug: bool = False
    log_level: str = "INFO"
    storage_backend: Literal["memory", "database"] = "memory"
    database_url: str = "sqlite:///./weekplan.db"

    ai_generation_enabled: bool = False
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    ai_timeout_seconds: float = 20.0

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "weekplan"

    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    replan_job_hour: int = 23
    replan_job_minute: int = 30
    jobs_run_on_startup: bool = False

    default_focus_time_start: str = "18:00"
    default_focus_time_end: str = "22:00"
    default_session_minutes: int = 45
    default_break_minutes: int = 10
    default_daily_available_minutes: int = 180


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
