"""Market data provider protocol."""

from typing import Protocol

from pricefolio.domain.models import Quote, PriceBar, MarketTicker


class MarketDataProvider(Protocol):
    """
    Protocol for market data providers.

    Implementations raise on failure; callers treat any exception, and any
    non-numeric, non-finite or zero price, as "source unavailable".
    """

    def fetch_quote(self, symbol: str) -> Quote:
        """Fetch the latest quote for a single symbol."""
        ...

    def fetch_series(self, symbol: str, range_spec: str) -> list[PriceBar]:
        """
        Fetch a price series for symbol.

        range_spec is a provider-neutral lookback such as "1d", "7d", "1mo", "1y".
        Bars are returned in chronological order.
        """
        ...

    def fetch_market_data(self, limit: int = 50) -> list[MarketTicker]:
        """Fetch a market listing (top assets with current price and 24h change)."""
        ...
