"""Domain layer - pure business models with no external dependencies."""

from pricefolio.domain.models import (
    PriceSource,
    RsiSignal,
    MacdSignal,
    BollingerPosition,
    PricePoint,
    PriceBar,
    Quote,
    LiveQuote,
    MarketTicker,
    PortfolioValue,
    HoldingRecord,
    Holding,
)

__all__ = [
    "PriceSource",
    "RsiSignal",
    "MacdSignal",
    "BollingerPosition",
    "PricePoint",
    "PriceBar",
    "Quote",
    "LiveQuote",
    "MarketTicker",
    "PortfolioValue",
    "HoldingRecord",
    "Holding",
]
