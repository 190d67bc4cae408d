"""
Market data provider backed by Yahoo Finance via yfinance.

yfinance is imported lazily so tests can patch it and the stub provider works
without network access.
"""

import logging
from typing import Optional

from pricefolio.core.exceptions import QuoteUnavailableError, ValidationError
from pricefolio.core.numbers import as_finite
from pricefolio.core.timezone import now_ms, to_epoch_ms
from pricefolio.domain.models import Quote, PriceBar, MarketTicker

logger = logging.getLogger(__name__)


def _get_yf():
    import yfinance as yf
    return yf


# range_spec -> (yfinance period, yfinance interval)
_RANGE_MAP: dict[str, tuple[str, str]] = {
    "1d": ("1d", "60m"),
    "7d": ("7d", "60m"),
    "1mo": ("1mo", "1d"),
    "30d": ("1mo", "1d"),
    "3mo": ("3mo", "1d"),
    "90d": ("3mo", "1d"),
    "1y": ("1y", "1d"),
}

# Crypto pairs used for the market listing: yahoo symbol -> (coin id, symbol)
_CRYPTO_PAIRS: list[tuple[str, str, str]] = [
    ("BTC-USD", "bitcoin", "btc"),
    ("ETH-USD", "ethereum", "eth"),
    ("USDT-USD", "tether", "usdt"),
    ("BNB-USD", "binancecoin", "bnb"),
    ("SOL-USD", "solana", "sol"),
    ("USDC-USD", "usd-coin", "usdc"),
    ("XRP-USD", "ripple", "xrp"),
    ("DOGE-USD", "dogecoin", "doge"),
    ("ADA-USD", "cardano", "ada"),
    ("TRX-USD", "tron", "trx"),
]

_CRYPTO_YAHOO_SYMBOLS: dict[str, str] = {symbol.upper(): pair for pair, _, symbol in _CRYPTO_PAIRS}


def _yahoo_symbol(symbol: str) -> str:
    """Map a crypto symbol (BTC) to its Yahoo USD pair (BTC-USD)."""
    upper_symbol = symbol.upper()
    return _CRYPTO_YAHOO_SYMBOLS.get(upper_symbol, upper_symbol)


def _to_float(value) -> Optional[float]:
    """Coerce a yfinance/pandas value to float; NaN and junk become None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return as_finite(float(value))
    except (TypeError, ValueError):
        return None


def _quote_from_info(symbol: str, info) -> Quote:
    """Build a Quote from a yfinance info dict."""
    if not isinstance(info, dict):
        raise QuoteUnavailableError(symbol, "no info")

    # Price: currentPrice preferred, then regularMarketPrice
    price = _to_float(info.get("currentPrice"))
    if price is None:
        price = _to_float(info.get("regularMarketPrice"))
    if price is None:
        raise QuoteUnavailableError(symbol, "no price")

    change_percent = _to_float(info.get("regularMarketChangePercent"))
    if change_percent is None:
        prev_close = _to_float(info.get("previousClose") or info.get("regularMarketPreviousClose"))
        change_percent = (price - prev_close) / prev_close * 100 if prev_close else 0.0

    # trailingAnnualDividendYield is a fraction; store as percent
    dividend_yield = _to_float(info.get("trailingAnnualDividendYield"))
    if dividend_yield is not None:
        dividend_yield *= 100

    return Quote(
        symbol=symbol,
        price=price,
        change_percent=change_percent,
        currency=info.get("currency") or "USD",
        timestamp=now_ms(),
        dividend_yield=dividend_yield,
        name=(info.get("longName") or info.get("shortName") or "").strip() or None,
    )


class YFinanceMarketDataProvider:
    """Fetches quotes and history from Yahoo Finance."""

    def fetch_quote(self, symbol: str) -> Quote:
        yf = _get_yf()
        upper_symbol = symbol.upper()
        ticker = yf.Ticker(_yahoo_symbol(upper_symbol))
        return _quote_from_info(upper_symbol, ticker.info)

    def fetch_series(self, symbol: str, range_spec: str) -> list[PriceBar]:
        if range_spec not in _RANGE_MAP:
            raise ValidationError(f"Unsupported range: {range_spec}")
        period, interval = _RANGE_MAP[range_spec]

        yf = _get_yf()
        history = yf.Ticker(_yahoo_symbol(symbol)).history(period=period, interval=interval)
        if history is None or history.empty:
            return []

        bars: list[PriceBar] = []
        for index, row in history.iterrows():
            close = _to_float(row.get("Close"))
            if close is None:
                continue
            bars.append(
                PriceBar(
                    close=close,
                    high=_to_float(row.get("High")),
                    low=_to_float(row.get("Low")),
                    open=_to_float(row.get("Open")),
                    volume=_to_float(row.get("Volume")),
                    timestamp=to_epoch_ms(index.to_pydatetime()),
                )
            )
        return bars

    def fetch_market_data(self, limit: int = 50) -> list[MarketTicker]:
        yf = _get_yf()
        pairs = _CRYPTO_PAIRS[:limit]
        tickers = yf.Tickers(" ".join(pair for pair, _, _ in pairs))

        result: list[MarketTicker] = []
        for pair, coin_id, symbol in pairs:
            try:
                quote = _quote_from_info(pair, tickers.tickers[pair].info)
            except Exception as exc:
                logger.debug("Market listing skipped %s: %s", pair, exc)
                continue
            result.append(
                MarketTicker(
                    id=coin_id,
                    symbol=symbol,
                    current_price=quote.price,
                    price_change_percentage_24h=quote.change_percent,
                    name=quote.name,
                )
            )
        return result
