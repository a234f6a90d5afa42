"""
Configuration settings for the catalog importer
Loads from environment variables and an optional .env file
"""

import json
from functools import lru_cache
from typing import Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./catalog_importer.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Queue
    redis_url: str = "redis://127.0.0.1:6379/0"
    celery_broker_url: Optional[str] = None
    celery_result_backend: Optional[str] = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: List[str] = Field(default=["http://localhost:3000"])

    # Destination platform
    destination_api_version: str = "2026-01"
    destination_request_timeout: float = 30.0

    # Rate-limit retry (1s, 2s, 4s, 8s, ...)
    throttle_max_attempts: int = 5
    throttle_base_delay: float = 1.0

    # Scraper
    scraper_page_size: int = 250  # Max allowed by the public listing endpoint
    scraper_timeout: float = 20.0
    scraper_user_agent: str = "catalog-importer/0.1"

    # Media re-encoding
    image_max_dimension: int = 2000
    image_jpeg_quality: int = 85
    image_download_timeout: float = 30.0

    # Quota
    trial_days: int = 2
    billing_cycle_days: int = 30

    # Worker
    import_worker_concurrency: int = 2  # Keep within the destination rate-limit bucket

    # Copy rewriting
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 60.0
    rewrite_max_tokens: int = 1000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> List[str]:
        """Parse CORS origins from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # Fall back to comma-separated list
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def broker_url(self) -> str:
        return self.celery_broker_url or self.redis_url

    @property
    def result_backend(self) -> str:
        return self.celery_result_backend or self.redis_url

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    get_settings.cache_clear()
