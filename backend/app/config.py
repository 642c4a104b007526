"""
Store env variables and other config settings.
"""
from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr


class FailurePolicy(str, Enum):
    """How the apply endpoint reports processing failures."""
    LENIENT = "lenient"  # never fail the HTTP call
    STRICT = "strict"    # surface failures as 5xx


class SubmitMode(str, Enum):
    DRY_RUN = "dry_run"
    LIVE = "live"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars to prevent crashes
    )

    # Server
    app_name: str = "Job Applier API"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # LLM Configuration
    # NOTE: keep it optional for import-time; a missing key means fallback text.
    gemini_api_key: SecretStr | None = Field(default=None, description="Text completion provider")
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str | None = Field(default=None, description="Override the Gemini endpoint")
    llm_timeout_seconds: float = 15

    failure_policy: FailurePolicy = FailurePolicy.LENIENT

    # Browser automation
    automation_enabled: bool = False
    submit_mode: SubmitMode = SubmitMode.DRY_RUN
    automation_headless: bool = True
    automation_max_sessions: int = Field(default=2, ge=1)
    automation_navigation_timeout_ms: int = 30000
    automation_field_timeout_ms: int = 5000
    automation_review_delay_ms: int = 0

    # Applicant details used for form filling
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""

    resume_path: str | None = None
    allow_client_resume_path: bool = False
    resume_download_timeout_seconds: float = 20


@lru_cache
def get_settings() -> Settings:
    return Settings()

