"""Application context for in-process service management.

Provides a centralized way to access all services without HTTP. Unlike the
per-request FastAPI wiring, the context keeps one price cache, one quote
service and one refresher alive for the whole process.
"""

from pathlib import Path
from typing import Optional

from pricefolio.config.settings import Settings, set_settings, get_settings
from pricefolio.repositories.sqlalchemy.database import (
    init_db_with_path,
    reset_database,
    get_session_factory,
)
from pricefolio.repositories.sqlalchemy import (
    SqlAlchemyKeyValueStore,
    SqlAlchemyHoldingsRepository,
)
from pricefolio.providers import MarketDataProvider, create_provider
from pricefolio.services import (
    PriceCacheService,
    PriceResolver,
    MarketDataService,
    HoldingsService,
    PortfolioAnalyticsService,
    TechnicalAnalysisService,
    AnalysisService,
    PriceRefresher,
)
from pricefolio.csv import CsvHoldingsImporter


class AppContext:
    """
    Application context providing in-process access to all services.

    Services are created lazily on first access. Repositories open a
    short-lived session per call, so the background price refresher never
    shares a Session with the calling thread.
    """

    def __init__(self, data_dir: Optional[Path] = None, provider: Optional[MarketDataProvider] = None):
        """
        Initialize application context.

        Args:
            data_dir: Optional data directory. If not provided, uses default.
            provider: Optional market data provider. Defaults to the configured one.
        """
        self._data_dir = data_dir
        self._provider = provider
        self._initialized = False
        self._reset_services()

    def _reset_services(self) -> None:
        self._price_cache: Optional[PriceCacheService] = None
        self._resolver: Optional[PriceResolver] = None
        self._market_data_service: Optional[MarketDataService] = None
        self._holdings_service: Optional[HoldingsService] = None
        self._analysis_service: Optional[AnalysisService] = None
        self._price_refresher: Optional[PriceRefresher] = None
        self._csv_importer: Optional[CsvHoldingsImporter] = None

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """
        Initialize or reinitialize the application with a data directory.

        Args:
            data_dir: Data directory path. Uses default if not provided.
        """
        if data_dir:
            self._data_dir = data_dir

        # Update global settings
        settings = Settings(data_dir=self._data_dir)
        set_settings(settings)

        # Reset and reinitialize database
        self.close()
        reset_database()
        db_path = settings.get_data_dir() / "pricefolio.db"
        init_db_with_path(db_path)

        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        """Check if context is initialized."""
        return self._initialized

    @property
    def data_dir(self) -> Path:
        """Get the current data directory."""
        return get_settings().get_data_dir()

    # Repository accessors
    def _get_kv_store(self) -> SqlAlchemyKeyValueStore:
        return SqlAlchemyKeyValueStore(session_factory=get_session_factory())

    def _get_holdings_repo(self) -> SqlAlchemyHoldingsRepository:
        return SqlAlchemyHoldingsRepository(session_factory=get_session_factory())

    # Service accessors
    @property
    def price_cache(self) -> PriceCacheService:
        """Get the PriceCacheService instance."""
        if self._price_cache is None:
            settings = get_settings()
            self._price_cache = PriceCacheService(
                store=self._get_kv_store(),
                ttl_ms=settings.price_cache_ttl_ms,
                cache_key=settings.price_cache_key,
            )
        return self._price_cache

    @property
    def resolver(self) -> PriceResolver:
        """Get the PriceResolver instance."""
        if self._resolver is None:
            self._resolver = PriceResolver(
                cache=self.price_cache,
                fallback_prices=get_settings().fallback_prices,
            )
        return self._resolver

    @property
    def market_data(self) -> MarketDataService:
        """Get the MarketDataService instance."""
        if self._market_data_service is None:
            settings = get_settings()
            provider = self._provider or create_provider(settings.market_data_provider)
            self._market_data_service = MarketDataService(
                provider=provider,
                fetch_timeout_seconds=settings.quote_fetch_timeout_seconds,
                max_workers=settings.quote_fetch_max_workers,
            )
        return self._market_data_service

    @property
    def holdings(self) -> HoldingsService:
        """Get the HoldingsService instance."""
        if self._holdings_service is None:
            self._holdings_service = HoldingsService(
                repository=self._get_holdings_repo(),
                market_data=self.market_data,
                resolver=self.resolver,
                market_data_limit=get_settings().market_data_limit,
            )
        return self._holdings_service

    @property
    def analysis(self) -> AnalysisService:
        """Get the AnalysisService instance."""
        if self._analysis_service is None:
            settings = get_settings()
            self._analysis_service = AnalysisService(
                holdings_service=self.holdings,
                market_data_service=self.market_data,
                analytics=PortfolioAnalyticsService(
                    risk_free_rate=settings.risk_free_rate,
                    periods_per_year=settings.periods_per_year,
                ),
                technical=TechnicalAnalysisService(),
            )
        return self._analysis_service

    @property
    def price_refresher(self) -> PriceRefresher:
        """Get the PriceRefresher that re-runs the holdings refresh cycle."""
        if self._price_refresher is None:
            settings = get_settings()
            self._price_refresher = PriceRefresher(
                refresh=self.holdings.refresh_holdings,
                interval_seconds=settings.price_refresh_interval_seconds,
                stale_after_seconds=settings.price_stale_after_seconds,
            )
        return self._price_refresher

    # CSV utilities
    @property
    def csv_importer(self) -> CsvHoldingsImporter:
        """Get the CsvHoldingsImporter instance."""
        if self._csv_importer is None:
            self._csv_importer = CsvHoldingsImporter(repository=self._get_holdings_repo())
        return self._csv_importer

    def close(self) -> None:
        """Stop background polling and clean up resources."""
        if self._price_refresher is not None:
            self._price_refresher.stop()
        self._reset_services()


# Global application context
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: AppContext) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
