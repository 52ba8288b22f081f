"""
Main Settings Configuration

This module provides the base configuration settings shared by the storage toolkit.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseConfig):
    """Process-wide settings read by ``setup_logging``."""

    # Environment
    environment: str = Field(default="development", description="Deployment environment, selects the logging preset")

    # Logging
    log_level: Optional[str] = Field(default=None, description="Minimum log level, overrides the preset's level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
