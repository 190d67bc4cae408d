"""Domain models package."""

from pricefolio.domain.models.enums import (
    PriceSource,
    RsiSignal,
    MacdSignal,
    BollingerPosition,
)
from pricefolio.domain.models.price import (
    PricePoint,
    PriceBar,
    Quote,
    LiveQuote,
    MarketTicker,
    PortfolioValue,
)
from pricefolio.domain.models.holding import HoldingRecord, Holding

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
