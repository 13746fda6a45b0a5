"""Application configuration."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from fincore.models.config import EngineConfig

# Third-party loggers kept quiet regardless of the application level
_QUIET_LOGGERS = ("asyncio",)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"

    # Category list and default budgets (YAML); empty = budgets.yaml beside the package
    category_config_path: str = ""

    # Fetched price series cache
    series_cache_ttl_hours: float = 24.0
    series_cache_max_symbols: int = 100

    # Engine parameters
    income_category: str = "Income"
    trend_months: int = 3
    short_window: int = 20
    long_window: int = 50
    projection_steps: int = 5

    @property
    def category_config_file(self) -> Path | None:
        return Path(self.category_config_path) if self.category_config_path else None

    @property
    def series_cache_ttl_seconds(self) -> float:
        return self.series_cache_ttl_hours * 3600

    def engine_config(self) -> EngineConfig:
        """Build the engine configuration from these settings."""
        return EngineConfig(
            income_category=self.income_category,
            trend_months=self.trend_months,
            short_window=self.short_window,
            long_window=self.long_window,
            projection_steps=self.projection_steps,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
