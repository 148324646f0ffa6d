"""
Application configuration settings.

All configuration is loaded from environment variables with sensible defaults.
"""
import json
from decimal import Decimal
from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "MTG Catalog Engine"
    api_debug: bool = True

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Database
    postgres_host: str = "db"
    postgres_port: int = 5432
    postgres_user: str = "mtg_user"
    postgres_password: str = "mtg_password"
    postgres_db: str = "mtg_catalog"
    database_url: str | None = None

    # Celery (catalog sync jobs)
    celery_broker_url: str = "redis://redis:6379/0"
    celery_result_backend: str = "redis://redis:6379/0"

    # Scryfall API
    # Rate limit: 50-100ms between requests (10 requests/second average)
    scryfall_base_url: str = "https://api.scryfall.com"
    scryfall_rate_limit_ms: int = 75
    scryfall_max_retries: int = 3
    scryfall_backoff_factor: float = 2.0
    external_api_timeout: int = 10

    # Search
    search_min_query_length: int = 2
    search_default_limit: int = 20
    search_max_limit: int = 100
    # Catalog entries considered per search, best name matches first
    search_max_candidates: int = 500

    # Pricing
    pricing_floor: Decimal = Decimal("0.25")
    pricing_default_base_price: Decimal = Decimal("10.00")
    marketplace_fee_percent: Decimal = Decimal("4.5")
    # Fixed USD -> AUD multiplier used when a native AUD price is missing.
    # Not refreshed from a live FX feed.
    aud_per_usd: Decimal = Decimal("1.55")
    # Latest-price cache; 0 disables it and every lookup hits the database
    price_cache_ttl_seconds: int = 0
    price_cache_max_size: int = 1000

    # Bulk import
    import_inter_row_delay_ms: int = 100
    import_concurrency: int = 1
    import_lookup_timeout_seconds: float = 5.0
    import_fuzzy_threshold: float = 88.0
    import_max_file_bytes: int = 10 * 1024 * 1024

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [v]
        return v

    @property
    def database_url_computed(self) -> str:
        """Compute database URL from components if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
