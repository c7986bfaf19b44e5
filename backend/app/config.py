"""
Application configuration using Pydantic Settings.
Loads from environment variables and .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Radar"
    app_env: str = "development"  # development, staging, production
    debug: bool = True
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql://localhost:5432/radar"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",  # Local web dev
    ]

    # Proximity queries
    location_freshness_seconds: int = 60 * 60  # 1 hour
    nearby_default_radius_m: float = 1000
    nearby_default_limit: int = 50
    nearby_max_limit: int = 100

    # Polling client
    polling_interval_ms: int = 5000
    polling_radius_m: float = 2_000_000
    api_base_url: str = "http://localhost:8000"
    api_timeout_seconds: float = 10.0

    @property
    def polling_interval_seconds(self) -> float:
        return self.polling_interval_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
