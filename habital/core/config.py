"""
Application configuration using Pydantic Settings.

Centralizes all configuration with environment variable support
(``HABITAL_`` prefix) and an optional ``.env`` file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Database
    database_url: str = "sqlite:///./data/habital.db"
    database_echo: bool = False

    # Calendar: IANA zone used to turn timestamps into calendar days.
    # None means the host's local zone.
    timezone: Optional[str] = None

    # Scheduling
    next_occurrence_horizon_days: int = 366

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_to_file: bool = False

    class Config:
        env_prefix = "HABITAL_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("next_occurrence_horizon_days")
    @classmethod
    def _positive_horizon(cls, value: int) -> int:
        if value < 1:
            raise ValueError("next_occurrence_horizon_days must be at least 1")
        return value


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
