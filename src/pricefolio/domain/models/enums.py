"""Enumerations for domain models."""

from enum import Enum


class PriceSource(str, Enum):
    """Where a resolved price or change value came from."""

    LIVE_QUOTE = "LIVE_QUOTE"  # Value attached to the holding/token itself
    MARKET_DATA = "MARKET_DATA"  # Market listing matched by id or symbol
    CACHE = "CACHE"  # Last known good price
    FALLBACK = "FALLBACK"  # Static fallback table
    NONE = "NONE"  # Nothing available; caller treats as unknown


class RsiSignal(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


class MacdSignal(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class BollingerPosition(str, Enum):
    ABOVE_UPPER = "above_upper"
    BELOW_LOWER = "below_lower"
    NEAR_UPPER = "near_upper"
    NEAR_LOWER = "near_lower"
    MIDDLE = "middle"
    UNKNOWN = "unknown"
