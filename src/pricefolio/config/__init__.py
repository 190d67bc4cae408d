"""Configuration package."""

from pricefolio.config.settings import (
    Settings,
    DEFAULT_FALLBACK_PRICES,
    get_settings,
    set_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "DEFAULT_FALLBACK_PRICES",
    "get_settings",
    "set_settings",
    "reset_settings",
]
