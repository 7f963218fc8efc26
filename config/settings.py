"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview_practice.db")
    UPLOAD_DIR: str = Field(default="data/uploads")
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    MAX_RESUME_BYTES: int = 10 * 1024 * 1024
    MAX_MEDIA_BYTES: int = 50 * 1024 * 1024
    QUESTION_COUNT: int = Field(default=10, ge=1)
    DEFAULT_TIME_LIMIT: int = Field(default=120, ge=1)
    TRANSCRIPT_PLACEHOLDER: str = "Transcript not available"
    PASSWORD_MIN_LENGTH: int = 6

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True)


settings = Settings()
