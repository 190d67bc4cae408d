"""Service layer - business logic orchestration."""

from pricefolio.services.price_cache_service import PriceCacheService
from pricefolio.services.price_resolver import PriceResolver, ResolutionRequest
from pricefolio.services.market_data_service import MarketDataService
from pricefolio.services.technical_analysis_service import (
    TechnicalAnalysisService,
    IndicatorOptions,
)
from pricefolio.services.portfolio_analytics_service import PortfolioAnalyticsService
from pricefolio.services.holdings_service import HoldingsService
from pricefolio.services.analysis_service import AnalysisService
from pricefolio.services.price_refresher import PriceRefresher

__all__ = [
    "PriceCacheService",
    "PriceResolver",
    "ResolutionRequest",
    "MarketDataService",
    "TechnicalAnalysisService",
    "IndicatorOptions",
    "PortfolioAnalyticsService",
    "HoldingsService",
    "AnalysisService",
    "PriceRefresher",
]
