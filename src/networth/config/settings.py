"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Default location for the SQLite store and logs."""
    return Path.home() / ".networth"


class Settings(BaseSettings):
    """
    Application configuration loaded from ``NETWORTH_*`` environment variables.

    Rate weights are keyed by provider name; providers not listed use
    ``default_source_weight``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NETWORTH_",
    )

    app_name: str = "Net Worth Performance Engine"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"
    log_to_file: bool = False

    # Reporting currency for users without an explicit base currency
    default_base_currency: str = "USD"

    # Exchange rate settings
    rate_cache_ttl_seconds: int = 600
    provider_timeout_seconds: float = 5.0
    rate_providers: list[str] = ["yahoo", "exchangerate-api"]
    rate_source_weights: dict[str, float] = {
        "exchangerate-api": 0.6,
        "yahoo": 0.4,
    }
    default_source_weight: float = 1.0
    outlier_threshold_pct: float = 5.0
    outlier_min_sources: int = 3
    max_quote_age_seconds: int = 2 * 24 * 60 * 60
    exchangerate_api_url: str = "https://api.exchangerate-api.com/v4/latest"

    # Daily snapshot scheduler
    scheduler_enabled: bool = True
    snapshot_schedule_time: str = "23:59"
    snapshot_schedule_timezone: str = "Europe/Dublin"

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "networth.db"
        return f"sqlite:///{db_path}"

    def get_log_dir(self) -> Path:
        """Get the log directory."""
        log_dir = self.get_data_dir() / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir

    def schedule_hour_minute(self) -> tuple[int, int]:
        """Parse ``snapshot_schedule_time`` (HH:MM) into hour and minute."""
        hour, minute = self.snapshot_schedule_time.split(":", 1)
        return int(hour), int(minute)


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
