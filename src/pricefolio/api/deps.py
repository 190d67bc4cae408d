"""Dependency injection for FastAPI."""

import threading
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from pricefolio.config.settings import get_settings
from pricefolio.csv import CsvHoldingsImporter
from pricefolio.providers import MarketDataProvider, create_provider
from pricefolio.repositories.protocols import KeyValueStore
from pricefolio.repositories.sqlalchemy.database import get_db, get_session_factory
from pricefolio.repositories.sqlalchemy import (
    SqlAlchemyKeyValueStore,
    SqlAlchemyHoldingsRepository,
)
from pricefolio.services import (
    PriceCacheService,
    PriceResolver,
    MarketDataService,
    HoldingsService,
    PortfolioAnalyticsService,
    TechnicalAnalysisService,
    AnalysisService,
)


# One price cache per process; its in-memory map outlives any request
_price_cache: Optional[PriceCacheService] = None
_price_cache_lock = threading.Lock()


def get_cache_store() -> KeyValueStore:
    """Provide the KeyValueStore behind the price cache (a session per call)."""
    return SqlAlchemyKeyValueStore(session_factory=get_session_factory())


def get_holdings_repo(db: Session = Depends(get_db)) -> SqlAlchemyHoldingsRepository:
    """Provide HoldingsRepository instance."""
    return SqlAlchemyHoldingsRepository(db)


def get_market_provider() -> MarketDataProvider:
    """Provide MarketDataProvider instance (stub unless configured otherwise)."""
    return create_provider(get_settings().market_data_provider)


def get_price_cache(store: KeyValueStore = Depends(get_cache_store)) -> PriceCacheService:
    """
    Provide the process-wide PriceCacheService.

    The store is only used when the cache is first created; later requests
    share the same instance and its in-memory map.
    """
    global _price_cache
    with _price_cache_lock:
        if _price_cache is None:
            settings = get_settings()
            _price_cache = PriceCacheService(
                store=store,
                ttl_ms=settings.price_cache_ttl_ms,
                cache_key=settings.price_cache_key,
            )
        return _price_cache


def reset_price_cache() -> None:
    """Drop the process-wide price cache (on startup and after reconfiguration)."""
    global _price_cache
    with _price_cache_lock:
        _price_cache = None


def get_price_resolver(cache: PriceCacheService = Depends(get_price_cache)) -> PriceResolver:
    """Provide PriceResolver instance."""
    return PriceResolver(cache=cache, fallback_prices=get_settings().fallback_prices)


def get_market_data_service(
    provider: MarketDataProvider = Depends(get_market_provider),
) -> MarketDataService:
    """Provide MarketDataService instance."""
    settings = get_settings()
    return MarketDataService(
        provider=provider,
        fetch_timeout_seconds=settings.quote_fetch_timeout_seconds,
        max_workers=settings.quote_fetch_max_workers,
    )


def get_holdings_service(
    repo: SqlAlchemyHoldingsRepository = Depends(get_holdings_repo),
    market: MarketDataService = Depends(get_market_data_service),
    resolver: PriceResolver = Depends(get_price_resolver),
) -> HoldingsService:
    """Provide HoldingsService instance."""
    return HoldingsService(
        repository=repo,
        market_data=market,
        resolver=resolver,
        market_data_limit=get_settings().market_data_limit,
    )


def get_portfolio_analytics() -> PortfolioAnalyticsService:
    """Provide PortfolioAnalyticsService instance."""
    settings = get_settings()
    return PortfolioAnalyticsService(
        risk_free_rate=settings.risk_free_rate,
        periods_per_year=settings.periods_per_year,
    )


def get_technical_analysis() -> TechnicalAnalysisService:
    """Provide TechnicalAnalysisService instance."""
    return TechnicalAnalysisService()


def get_analysis_service(
    holdings: HoldingsService = Depends(get_holdings_service),
    market: MarketDataService = Depends(get_market_data_service),
    analytics: PortfolioAnalyticsService = Depends(get_portfolio_analytics),
    technical: TechnicalAnalysisService = Depends(get_technical_analysis),
) -> AnalysisService:
    """Provide AnalysisService instance."""
    return AnalysisService(
        holdings_service=holdings,
        market_data_service=market,
        analytics=analytics,
        technical=technical,
    )


def get_csv_importer(
    repo: SqlAlchemyHoldingsRepository = Depends(get_holdings_repo),
) -> CsvHoldingsImporter:
    """Provide CsvHoldingsImporter instance."""
    return CsvHoldingsImporter(repository=repo)
