"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Last-resort prices used when no live source and no cached price exist
DEFAULT_FALLBACK_PRICES: dict[str, float] = {
    "BTC": 51200.0,
    "ETH": 3200.0,
    "XRP": 0.52,
    "SOL": 95.0,
    "USDT": 1.0,
    "USDC": 1.0,
    "BNB": 320.0,
    "DOGE": 0.08,
    "ADA": 0.45,
    "TRX": 0.12,
}


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".pricefolio"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Pricefolio"
    app_version: str = "0.1.0"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Persistent price cache
    price_cache_ttl_seconds: int = 3600
    price_cache_key: str = "last_live_prices"

    # Quote fetching
    market_data_provider: str = "stub"
    quote_fetch_timeout_seconds: float = 10.0
    quote_fetch_max_workers: int = 8
    market_data_limit: int = 50

    # Price polling
    price_refresh_interval_seconds: float = 30.0
    price_stale_after_seconds: float = 60.0

    # Analytics
    risk_free_rate: float = 0.02
    periods_per_year: Optional[float] = None

    fallback_prices: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_FALLBACK_PRICES)
    )

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "pricefolio.db"
        return f"sqlite:///{db_path}"

    @property
    def price_cache_ttl_ms(self) -> int:
        return self.price_cache_ttl_seconds * 1000


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
