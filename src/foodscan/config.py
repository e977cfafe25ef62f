"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    off_base_url: str = "https://world.openfoodfacts.org/api/v2"
    off_user_agent: str = "FoodScanPro/2.0 (Enhanced Health Analysis)"
    off_timeout_seconds: float = 10.0
    off_retry_attempts: int = 3
    off_retry_delay_seconds: float = 1.0
    product_cache_ttl_seconds: int = 86400
    search_cache_ttl_seconds: int = 3600
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
