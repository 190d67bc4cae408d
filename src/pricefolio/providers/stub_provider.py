"""Stub market data provider for offline/testing use."""

import random
import zlib
from typing import Optional

from pricefolio.core.exceptions import ValidationError
from pricefolio.core.timezone import Clock, now_ms, MS_PER_DAY
from pricefolio.domain.models import Quote, PriceBar, MarketTicker


# Deterministic fake prices: symbol -> (last_price, prev_close)
_STUB_PRICES: dict[str, tuple[float, float]] = {
    "AAPL": (185.50, 184.25),
    "GOOGL": (142.75, 141.50),
    "MSFT": (378.25, 376.80),
    "AMZN": (178.50, 177.25),
    "TSLA": (248.75, 250.10),
    "NVDA": (485.25, 482.50),
    "SPY": (485.25, 484.10),
    "BTC": (60250.00, 59100.00),
    "ETH": (3310.40, 3275.00),
    "SOL": (98.20, 101.30),
    "BNB": (322.10, 318.90),
    "USDT": (1.00, 1.00),
    "USDC": (1.00, 1.00),
}

# Dividend yields (annual %) for the stub equities
_STUB_DIVIDEND_YIELDS: dict[str, float] = {
    "AAPL": 0.52,
    "MSFT": 0.74,
    "SPY": 1.31,
}

# symbol -> coin id for the stub market listing
_STUB_COIN_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "BNB": "binancecoin",
    "USDT": "tether",
    "USDC": "usd-coin",
}

# range_spec -> (bar count, bar interval in ms)
RANGE_SPECS: dict[str, tuple[int, int]] = {
    "1d": (24, MS_PER_DAY // 24),
    "7d": (7 * 24, MS_PER_DAY // 24),
    "1mo": (30, MS_PER_DAY),
    "30d": (30, MS_PER_DAY),
    "3mo": (90, MS_PER_DAY),
    "90d": (90, MS_PER_DAY),
    "1y": (365, MS_PER_DAY),
}


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Uses predefined prices for common symbols; generates prices for unknown
    symbols from a seed derived from the symbol, so repeated calls agree.
    """

    def __init__(self, seed: int = 42, clock: Optional[Clock] = None):
        self._seed = seed
        self._clock = clock or now_ms

    def fetch_quote(self, symbol: str) -> Quote:
        """Return a stub quote for symbol."""
        upper_symbol = symbol.upper()
        last_price, prev_close = self._prices_for(upper_symbol)
        return Quote(
            symbol=upper_symbol,
            price=last_price,
            change_percent=round((last_price - prev_close) / prev_close * 100, 4),
            currency="USD",
            timestamp=self._clock(),
            dividend_yield=_STUB_DIVIDEND_YIELDS.get(upper_symbol),
        )

    def fetch_series(self, symbol: str, range_spec: str) -> list[PriceBar]:
        """Generate a deterministic random walk ending at the stub price."""
        if range_spec not in RANGE_SPECS:
            raise ValidationError(f"Unsupported range: {range_spec}")

        count, interval_ms = RANGE_SPECS[range_spec]
        upper_symbol = symbol.upper()
        last_price, _ = self._prices_for(upper_symbol)
        rng = self._rng_for(upper_symbol + range_spec)

        # Walk backwards from the latest close so the series ends at last_price
        closes = [last_price]
        for _ in range(count - 1):
            step = 1 + (rng.random() - 0.5) * 0.04
            closes.append(closes[-1] / step)
        closes.reverse()

        end = self._clock()
        bars: list[PriceBar] = []
        prev_close = closes[0]
        for i, close in enumerate(closes):
            spread = abs(close) * rng.random() * 0.01
            open_ = prev_close
            bars.append(
                PriceBar(
                    close=round(close, 6),
                    open=round(open_, 6),
                    high=round(max(open_, close) + spread, 6),
                    low=round(max(min(open_, close) - spread, 0.0), 6),
                    volume=round(1_000_000 * (0.5 + rng.random()), 2),
                    timestamp=end - (count - 1 - i) * interval_ms,
                )
            )
            prev_close = close
        return bars

    def fetch_market_data(self, limit: int = 50) -> list[MarketTicker]:
        """Return the stub crypto listing."""
        tickers: list[MarketTicker] = []
        for symbol, coin_id in _STUB_COIN_IDS.items():
            last_price, prev_close = _STUB_PRICES[symbol]
            tickers.append(
                MarketTicker(
                    id=coin_id,
                    symbol=symbol.lower(),
                    current_price=last_price,
                    price_change_percentage_24h=round((last_price - prev_close) / prev_close * 100, 4),
                )
            )
        return tickers[:limit]

    def _prices_for(self, symbol: str) -> tuple[float, float]:
        if symbol in _STUB_PRICES:
            return _STUB_PRICES[symbol]
        rng = self._rng_for(symbol)
        last_price = round(50 + rng.random() * 200, 2)
        change_pct = (rng.random() - 0.5) * 0.04
        prev_close = round(last_price / (1 + change_pct), 2)
        return last_price, prev_close

    def _rng_for(self, key: str) -> random.Random:
        return random.Random(self._seed + zlib.crc32(key.encode("utf-8")))
