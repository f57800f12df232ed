"""
Configuration settings for the Car Rental Manager.
Uses Pydantic for type-safe configuration management.
"""
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Car Rental Manager"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Storage
    data_file: Path = Path("data") / "rentals.csv"
    backup_suffix: str = ".backup"

    # Pricing
    default_daily_rate: float = 50.0

    class Config:
        env_file = ".env"
        env_prefix = "CAR_RENTAL_"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
