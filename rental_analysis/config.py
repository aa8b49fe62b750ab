"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Rental Property Analysis Calculator"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Temporary financing defaults
    default_cash_out_ltv: float = 75.0
    default_temp_loan_term_months: int = 6
    refinance_process_months: int = 1

    # Projections
    projection_years: int = 30
    report_years: List[int] = [1, 5, 10, 20, 30]

    # Markdown import limits
    markdown_max_bytes: int = 1048576
    markdown_max_field_length: int = 1000

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
