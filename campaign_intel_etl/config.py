"""Configuration management using Pydantic settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env should be)
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str

    # ETL Configuration
    batch_size: int = 1000

    # Attribution Configuration
    attribution_fuzzy_threshold: float = 0.6
    attribution_fuzzy_confidence_cap: float = 0.80
    attribution_task_timeout_seconds: int = 1800  # 30 minutes

    # Trend Detection Configuration
    # A topic trends on sustained growth (velocity + daily floor)
    # or on a short burst (6h volume alone).
    trend_velocity_threshold: float = 50.0
    trend_min_daily_count: int = 3
    trend_burst_six_hour_count: int = 5
    trend_breaking_z_score: float = 3.0
    trend_stale_hours: float = 12.0
    trend_lookback_days: int = 7
    trend_recompute_timeout_seconds: int = 600  # 10 minutes

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),  # Explicit path to .env
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# noinspection PyArgumentList
@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore
