"""
Price resolution through an ordered list of sources.

Precedence (first usable value wins):
1. live quote attached to the holding/token
2. market data listing matched by coin id or symbol
3. last-known-good price from the persistent cache
4. static fallback table

The same order applies to the 24h change, except that the cache holds no
change value and the fallback table resolves the change to 0.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from pricefolio.core.numbers import as_finite, as_positive_price
from pricefolio.core.symbols import normalize_symbol
from pricefolio.domain.models import LiveQuote, MarketTicker, PriceSource
from pricefolio.domain.views import ResolvedPrice
from pricefolio.services.price_cache_service import PriceCacheService

logger = logging.getLogger(__name__)

# Sources whose prices are written back to the cache
LIVE_SOURCES = frozenset({PriceSource.LIVE_QUOTE, PriceSource.MARKET_DATA})


@dataclass
class ResolutionRequest:
    """Everything known about a symbol at resolution time."""

    symbol: str
    live_quote: Optional[LiveQuote] = None
    market_data: Sequence[MarketTicker] = ()
    coin_id: Optional[str] = None


class PriceStrategy(Protocol):
    """One stage of the resolution chain."""

    source: PriceSource

    def price(self, request: ResolutionRequest) -> Optional[float]:
        """Return a usable price, or None if this source has none."""
        ...

    def change(self, request: ResolutionRequest) -> Optional[float]:
        """Return a usable 24h change percentage, or None."""
        ...


class LiveQuoteStrategy:
    source = PriceSource.LIVE_QUOTE

    def price(self, request: ResolutionRequest) -> Optional[float]:
        if request.live_quote is None:
            return None
        return as_positive_price(request.live_quote.price)

    def change(self, request: ResolutionRequest) -> Optional[float]:
        if request.live_quote is None:
            return None
        return as_finite(request.live_quote.change_percent)


class MarketDataStrategy:
    source = PriceSource.MARKET_DATA

    def price(self, request: ResolutionRequest) -> Optional[float]:
        ticker = self._match(request)
        return as_positive_price(ticker.current_price) if ticker else None

    def change(self, request: ResolutionRequest) -> Optional[float]:
        ticker = self._match(request)
        return as_finite(ticker.price_change_percentage_24h) if ticker else None

    @staticmethod
    def _match(request: ResolutionRequest) -> Optional[MarketTicker]:
        symbol = normalize_symbol(request.symbol)
        for ticker in request.market_data:
            if request.coin_id and ticker.id == request.coin_id:
                return ticker
            if normalize_symbol(ticker.symbol) == symbol:
                return ticker
        return None


class CachedPriceStrategy:
    source = PriceSource.CACHE

    def __init__(self, cache: PriceCacheService):
        self._cache = cache

    def price(self, request: ResolutionRequest) -> Optional[float]:
        return as_positive_price(self._cache.get(request.symbol))

    def change(self, request: ResolutionRequest) -> Optional[float]:
        return None


class FallbackTableStrategy:
    source = PriceSource.FALLBACK

    def __init__(self, prices: Mapping[str, float]):
        self._prices = {normalize_symbol(symbol): price for symbol, price in prices.items()}

    def price(self, request: ResolutionRequest) -> Optional[float]:
        return as_positive_price(self._prices.get(normalize_symbol(request.symbol)))

    def change(self, request: ResolutionRequest) -> Optional[float]:
        return 0.0 if normalize_symbol(request.symbol) in self._prices else None


def default_strategies(
    cache: PriceCacheService,
    fallback_prices: Optional[Mapping[str, float]] = None,
) -> list[PriceStrategy]:
    """Build the standard four-stage chain."""
    return [
        LiveQuoteStrategy(),
        MarketDataStrategy(),
        CachedPriceStrategy(cache),
        FallbackTableStrategy(fallback_prices or {}),
    ]


class PriceResolver:
    """
    Resolves one authoritative price and 24h change per symbol.

    Every price taken from a live source is saved to the cache before the
    result is returned, so the cache always holds the latest observed price.
    """

    def __init__(
        self,
        cache: PriceCacheService,
        fallback_prices: Optional[Mapping[str, float]] = None,
        strategies: Optional[Iterable[PriceStrategy]] = None,
    ):
        self._cache = cache
        if strategies is None:
            self._strategies = default_strategies(cache, fallback_prices)
        else:
            self._strategies = list(strategies)

    @property
    def strategies(self) -> list[PriceStrategy]:
        return list(self._strategies)

    def resolve(self, request: ResolutionRequest) -> ResolvedPrice:
        """Resolve price and change for a single symbol."""
        symbol = normalize_symbol(request.symbol)
        result = ResolvedPrice(symbol=symbol)

        for strategy in self._strategies:
            price = self._call(strategy, "price", request)
            if price is not None:
                result.price = price
                result.price_source = strategy.source
                break

        for strategy in self._strategies:
            change = self._call(strategy, "change", request)
            if change is not None:
                result.change_percent = change
                result.change_source = strategy.source
                break

        if result.price_source in LIVE_SOURCES:
            self._cache.save(symbol, result.price)

        logger.debug(
            "Resolved %s: price=%s (%s), change=%s (%s)",
            symbol,
            result.price,
            result.price_source.value,
            result.change_percent,
            result.change_source.value,
        )
        return result

    def resolve_many(self, requests: Iterable[ResolutionRequest]) -> dict[str, ResolvedPrice]:
        """Resolve a batch of symbols, keyed by upper-case symbol."""
        results: dict[str, ResolvedPrice] = {}
        for request in requests:
            resolved = self.resolve(request)
            results[resolved.symbol] = resolved
        return results

    @staticmethod
    def _call(strategy: PriceStrategy, method: str, request: ResolutionRequest) -> Optional[float]:
        try:
            return getattr(strategy, method)(request)
        except Exception:
            logger.warning(
                "Price source %s failed for %s",
                strategy.source.value,
                request.symbol,
                exc_info=True,
            )
            return None
