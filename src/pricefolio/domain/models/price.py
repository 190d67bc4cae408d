"""Price models: cached points, bars, quotes and market listings."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class PricePoint:
    """
    A price observed at a point in time (epoch milliseconds).

    Superseded by newer points for the same symbol; ignored once older than the cache TTL.
    """

    price: float
    timestamp: int

    def age_ms(self, now: int) -> int:
        return now - self.timestamp

    def to_dict(self) -> dict:
        return {"price": self.price, "timestamp": self.timestamp}


@dataclass(frozen=True)
class PriceBar:
    """Single bar of a price series (chronological, never mutated)."""

    close: float
    timestamp: int
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None
    volume: Optional[float] = None


@dataclass
class Quote:
    """Normalized quote returned by a market data provider."""

    symbol: str
    price: float
    change_percent: float
    currency: str = "USD"
    timestamp: Optional[int] = None
    dividend_yield: Optional[float] = None
    name: Optional[str] = None


@dataclass
class LiveQuote:
    """Live values attached to a holding or wallet token."""

    symbol: str
    price: Optional[float] = None
    change_percent: Optional[float] = None


@dataclass
class MarketTicker:
    """Entry of a market data listing (matched by coin id or symbol)."""

    id: str
    symbol: str
    current_price: Optional[float] = None
    price_change_percentage_24h: Optional[float] = None
    market_cap: Optional[float] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class PortfolioValue:
    """Portfolio value at a point in time (epoch milliseconds)."""

    timestamp: int
    value: float
