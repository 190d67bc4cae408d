"""Holdings service: enrich stored holdings with resolved prices."""

import logging
from typing import Optional, Sequence

from pricefolio.core.exceptions import ConfigurationError
from pricefolio.core.symbols import normalize_symbol
from pricefolio.domain.models import Holding, HoldingRecord, LiveQuote, Quote
from pricefolio.domain.views import AllocationItem, AllocationView, ResolvedPrice
from pricefolio.repositories.protocols import HoldingsRepository
from pricefolio.services.market_data_service import MarketDataService
from pricefolio.services.price_resolver import PriceResolver, ResolutionRequest

logger = logging.getLogger(__name__)


class HoldingsService:
    """
    Runs the holdings refresh cycle.

    Reads positions from the holdings provider, fetches live quotes for all
    of them concurrently plus the market listing, and resolves each price
    through the PriceResolver (which also keeps the price cache current).
    """

    def __init__(
        self,
        repository: Optional[HoldingsRepository],
        market_data: MarketDataService,
        resolver: PriceResolver,
        market_data_limit: int = 50,
    ):
        self._repo = repository
        self._market = market_data
        self._resolver = resolver
        self._market_data_limit = market_data_limit

    def list_records(self) -> list[HoldingRecord]:
        return self._require_repo().list_holdings()

    def refresh_holdings(self) -> list[Holding]:
        """Return every holding with its current price, change and dividend income."""
        records = self.list_records()
        if not records:
            return []

        coin_ids = {normalize_symbol(r.symbol): r.coin_id for r in records if r.coin_id}
        resolved_prices, quotes = self._resolve_all([r.symbol for r in records], coin_ids)

        holdings = []
        for record in records:
            symbol = normalize_symbol(record.symbol)
            resolved = resolved_prices.get(symbol)
            if resolved is None:
                logger.warning("Skipping holding with blank symbol: %r", record.symbol)
                continue
            quote = quotes.get(symbol)
            if not resolved.is_known:
                logger.info("No price available for %s; reporting as unknown", symbol)

            holding = Holding(
                symbol=symbol,
                quantity=record.quantity,
                average_price=record.average_price,
                current_price=resolved.price,
                change_percent=resolved.change_percent,
                currency=record.currency,
            )
            self._apply_dividends(holding, record, quote)
            holdings.append(holding)

        logger.debug("Refreshed %d holdings", len(holdings))
        return holdings

    def resolve_prices(self, symbols: Sequence[str]) -> dict[str, ResolvedPrice]:
        """Resolve price and change for arbitrary symbols, keyed by upper-case symbol."""
        resolved, _ = self._resolve_all(symbols)
        return resolved

    def _resolve_all(
        self,
        symbols: Sequence[str],
        coin_ids: Optional[dict[str, str]] = None,
    ) -> tuple[dict[str, ResolvedPrice], dict[str, Quote]]:
        keys = list(dict.fromkeys(k for k in map(normalize_symbol, symbols) if k))
        if not keys:
            return {}, {}

        quotes = self._market.get_quotes(keys)
        tickers = self._market.get_market_tickers(self._market_data_limit)
        coin_ids = coin_ids or {}

        requests = []
        for symbol in keys:
            quote = quotes.get(symbol)
            live = (
                LiveQuote(symbol=symbol, price=quote.price, change_percent=quote.change_percent)
                if quote
                else None
            )
            requests.append(
                ResolutionRequest(
                    symbol=symbol,
                    live_quote=live,
                    market_data=tickers,
                    coin_id=coin_ids.get(symbol),
                )
            )
        return self._resolver.resolve_many(requests), quotes

    def allocation(self, holdings: Optional[Sequence[Holding]] = None) -> AllocationView:
        """
        Portfolio allocation breakdown, largest position first.

        Holdings with an unknown price are left out rather than shown at 0%.
        """
        if holdings is None:
            holdings = self.refresh_holdings()

        priced = [h for h in holdings if h.has_price]
        total_value = sum(h.market_value for h in priced)

        items = [
            AllocationItem(
                symbol=h.symbol,
                market_value=h.market_value,
                percentage=h.market_value / total_value * 100 if total_value > 0 else 0.0,
            )
            for h in priced
        ]
        items.sort(key=lambda item: item.market_value, reverse=True)
        return AllocationView(items=items, total_value=total_value)

    def _require_repo(self) -> HoldingsRepository:
        if self._repo is None:
            raise ConfigurationError("No holdings provider configured")
        return self._repo

    @staticmethod
    def _apply_dividends(holding: Holding, record: HoldingRecord, quote: Optional[Quote]) -> None:
        """
        Carry over stored dividend data, deriving income from a yield when
        only the yield is known (stored yield first, then the quote's).
        """
        dividend_yield = record.dividend_yield
        if dividend_yield is None and quote is not None:
            dividend_yield = quote.dividend_yield

        income = record.annual_dividend_income
        if income is None and dividend_yield and holding.has_price:
            income = holding.market_value * dividend_yield / 100

        holding.dividend_yield = dividend_yield
        holding.annual_dividend_income = income
