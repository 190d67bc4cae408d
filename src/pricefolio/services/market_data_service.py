"""Market data service for quotes, price series and market listings."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional

from pricefolio.core.exceptions import QuoteUnavailableError, ValidationError
from pricefolio.core.numbers import as_finite, as_positive_price
from pricefolio.core.symbols import normalize_symbol
from pricefolio.core.timezone import Clock, now_ms
from pricefolio.domain.models import MarketTicker, PriceBar, Quote
from pricefolio.providers.market_data_provider import MarketDataProvider

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_WORKERS = 8


class MarketDataService:
    """
    Service for fetching market data.

    Wraps a provider with short-lived quote caching and graceful degradation:
    quotes are fetched one job per symbol on a thread pool, so a slow or
    failing symbol never blocks or fails the others. Failed, timed out and
    invalid quotes are simply missing from the result.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        cache_ttl_seconds: float = 0,
        clock: Optional[Clock] = None,
    ):
        self._provider = provider
        self._fetch_timeout = fetch_timeout_seconds
        self._max_workers = max(1, max_workers)
        self._cache_ttl_ms = cache_ttl_seconds * 1000
        self._clock = clock or now_ms
        # symbol -> (quote, fetched_at_ms)
        self._quote_cache: dict[str, tuple[Quote, int]] = {}

    @property
    def provider(self) -> MarketDataProvider:
        return self._provider

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """
        Fetch quotes for symbols concurrently.

        Returns dict mapping upper-case symbol -> Quote for every symbol whose
        fetch succeeded within the timeout with a usable price.
        """
        if not symbols:
            return {}

        # Normalize and de-duplicate, keeping order
        keys = list(dict.fromkeys(k for k in map(normalize_symbol, symbols) if k))

        result: dict[str, Quote] = {}
        missing: list[str] = []
        now = self._clock()
        for key in keys:
            cached = self._quote_cache.get(key)
            if cached and now - cached[1] < self._cache_ttl_ms:
                result[key] = cached[0]
            else:
                missing.append(key)

        if missing:
            fetched = self._fetch_concurrently(missing)
            fetched_at = self._clock()
            for key, quote in fetched.items():
                self._quote_cache[key] = (quote, fetched_at)
            result.update(fetched)

        return {k: result[k] for k in keys if k in result}

    def get_quote(self, symbol: str) -> Optional[Quote]:
        """Fetch a single quote, or None if unavailable."""
        return self.get_quotes([symbol]).get(normalize_symbol(symbol))

    def get_series(self, symbol: str, range_spec: str = "1mo") -> list[PriceBar]:
        """
        Fetch a chronological price series; empty on provider failure.

        An unsupported range_spec is a caller error and raises ValidationError.
        """
        try:
            bars = self._provider.fetch_series(normalize_symbol(symbol), range_spec)
        except ValidationError:
            raise
        except Exception as e:
            logger.warning("Series fetch failed for %s (%s): %s", symbol, range_spec, e)
            return []

        valid = [bar for bar in bars if as_finite(bar.close) is not None]
        if len(valid) != len(bars):
            logger.debug("Dropped %d bars with invalid closes for %s", len(bars) - len(valid), symbol)
        return sorted(valid, key=lambda bar: bar.timestamp)

    def get_market_tickers(self, limit: int = 50) -> list[MarketTicker]:
        """Fetch the market listing; empty on provider failure."""
        try:
            return self._provider.fetch_market_data(limit)
        except Exception as e:
            logger.warning("Market listing fetch failed: %s", e)
            return []

    def clear_cache(self) -> None:
        self._quote_cache.clear()

    def _fetch_concurrently(self, symbols: list[str]) -> dict[str, Quote]:
        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(symbols)),
            thread_name_prefix="quote-fetch",
        )
        try:
            futures = {executor.submit(self._fetch_one, s): s for s in symbols}
            done, not_done = wait(futures, timeout=self._fetch_timeout)

            result: dict[str, Quote] = {}
            for future in done:
                symbol = futures[future]
                try:
                    result[symbol] = future.result()
                except Exception as e:
                    logger.warning("Quote fetch failed for %s: %s", symbol, e)

            for future in not_done:
                logger.warning(
                    "Quote fetch for %s timed out after %.1fs", futures[future], self._fetch_timeout
                )
            return result
        finally:
            # Do not block on fetches that outlived the timeout
            executor.shutdown(wait=False, cancel_futures=True)

    def _fetch_one(self, symbol: str) -> Quote:
        quote = self._provider.fetch_quote(symbol)
        price = as_positive_price(quote.price)
        if price is None:
            raise QuoteUnavailableError(symbol, f"invalid price {quote.price!r}")
        quote.symbol = symbol
        quote.price = price
        return quote
