"""Price resolution and price cache endpoints."""

from fastapi import APIRouter, Depends, Query

from pricefolio.api.deps import (
    get_holdings_service,
    get_market_data_service,
    get_price_cache,
)
from pricefolio.api.schemas import (
    ResolvedPriceResponse,
    QuoteResponse,
    CachedPricesResponse,
    PurgeResponse,
)
from pricefolio.core.exceptions import ValidationError
from pricefolio.core.symbols import normalize_symbol
from pricefolio.services import HoldingsService, MarketDataService, PriceCacheService
from pricefolio.services.formatting import format_change, format_price

router = APIRouter(prefix="/prices", tags=["prices"])


def _parse_symbols(symbols: str) -> list[str]:
    symbol_list = [s for s in map(normalize_symbol, symbols.split(",")) if s]
    if not symbol_list:
        raise ValidationError("At least one symbol is required")
    return symbol_list


@router.get("", response_model=list[ResolvedPriceResponse])
def resolve_prices(
    symbols: str = Query(..., description="Comma-separated symbols"),
    holdings: HoldingsService = Depends(get_holdings_service),
) -> list[ResolvedPriceResponse]:
    """Resolve the best available price and 24h change for each symbol."""
    resolved = holdings.resolve_prices(_parse_symbols(symbols))

    responses = []
    for price in resolved.values():
        change = format_change(price.change_percent) if price.is_known else None
        responses.append(
            ResolvedPriceResponse(
                symbol=price.symbol,
                price=price.price,
                change_percent=price.change_percent,
                price_source=price.price_source,
                change_source=price.change_source,
                is_known=price.is_known,
                formatted_price=format_price(price.price),
                formatted_change=change.formatted if change else None,
            )
        )
    return responses


@router.get("/quotes", response_model=list[QuoteResponse])
def get_quotes(
    symbols: str = Query(..., description="Comma-separated symbols"),
    market: MarketDataService = Depends(get_market_data_service),
) -> list[QuoteResponse]:
    """Get live quotes; symbols whose fetch failed are omitted."""
    quotes = market.get_quotes(_parse_symbols(symbols))
    return [QuoteResponse.model_validate(q) for q in quotes.values()]


@router.get("/cache", response_model=CachedPricesResponse)
def get_cached_prices(
    cache: PriceCacheService = Depends(get_price_cache),
) -> CachedPricesResponse:
    """List every non-expired last-known-good price."""
    return CachedPricesResponse(prices=cache.get_all(), ttl_seconds=cache.ttl_ms // 1000)


@router.post("/cache/purge", response_model=PurgeResponse)
def purge_cached_prices(
    cache: PriceCacheService = Depends(get_price_cache),
) -> PurgeResponse:
    """Evict expired prices from the cache."""
    return PurgeResponse(purged=cache.purge_expired())
