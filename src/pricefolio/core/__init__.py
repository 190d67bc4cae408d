"""Core utilities and shared functionality."""

from pricefolio.core.timezone import (
    UTC,
    MS_PER_DAY,
    Clock,
    now_ms,
    now_utc,
    to_epoch_ms,
    parse_timestamp,
)
from pricefolio.core.symbols import normalize_symbol
from pricefolio.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    ConfigurationError,
    QuoteUnavailableError,
    InsufficientDataError,
)

__all__ = [
    "normalize_symbol",
    "UTC",
    "MS_PER_DAY",
    "Clock",
    "now_ms",
    "now_utc",
    "to_epoch_ms",
    "parse_timestamp",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    "QuoteUnavailableError",
    "InsufficientDataError",
]
