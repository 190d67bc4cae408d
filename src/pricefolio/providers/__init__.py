"""Market data providers module."""

from pricefolio.providers.market_data_provider import MarketDataProvider
from pricefolio.providers.stub_provider import StubMarketDataProvider
from pricefolio.providers.yfinance_provider import YFinanceMarketDataProvider


def create_provider(name: str) -> MarketDataProvider:
    """Create a provider by configured name ("stub" or "yfinance")."""
    if name == "yfinance":
        return YFinanceMarketDataProvider()
    return StubMarketDataProvider()


__all__ = [
    "MarketDataProvider",
    "StubMarketDataProvider",
    "YFinanceMarketDataProvider",
    "create_provider",
]
