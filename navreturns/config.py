"""
Engine configuration using Pydantic Settings.
"""

import os
from datetime import date
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("NAVRETURNS_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # App settings
    app_name: str = "NAV Returns Engine"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # NAV input
    nav_date_format: str = "%d-%m-%Y"  # upstream provider format (DD-MM-YYYY)

    # Output
    rounding_decimals: int = 2

    # Rolling returns: observations before this date are ignored
    default_inception_date: Optional[date] = None

    class Config:
        env_prefix = "NAVRETURNS_"
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
