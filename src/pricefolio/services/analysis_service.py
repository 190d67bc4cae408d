"""Analysis service: portfolio and technical analytics over live data."""

from typing import Optional, Sequence

from pricefolio.domain.models import PortfolioValue
from pricefolio.domain.views import (
    PortfolioMetrics,
    SnapshotMetrics,
    TechnicalAnalysis,
)
from pricefolio.services.holdings_service import HoldingsService
from pricefolio.services.market_data_service import MarketDataService
from pricefolio.services.portfolio_analytics_service import PortfolioAnalyticsService
from pricefolio.services.technical_analysis_service import (
    IndicatorOptions,
    TechnicalAnalysisService,
)


class AnalysisService:
    """
    Service for portfolio analytics and reporting.

    Feeds refreshed holdings and fetched price series into the stateless
    calculators.
    """

    def __init__(
        self,
        holdings_service: HoldingsService,
        market_data_service: MarketDataService,
        analytics: Optional[PortfolioAnalyticsService] = None,
        technical: Optional[TechnicalAnalysisService] = None,
    ):
        self._holdings = holdings_service
        self._market = market_data_service
        self._analytics = analytics or PortfolioAnalyticsService()
        self._technical = technical or TechnicalAnalysisService()

    def portfolio_snapshot(self) -> SnapshotMetrics:
        """Snapshot metrics for the current holdings."""
        return self._analytics.calculate_snapshot(self._holdings.refresh_holdings())

    def portfolio_metrics(
        self,
        values: Optional[Sequence[PortfolioValue]] = None,
        risk_free_rate: Optional[float] = None,
        periods_per_year: Optional[float] = None,
        include_holdings: bool = True,
    ) -> PortfolioMetrics:
        """
        Combined metrics: holdings snapshot (if requested) plus the value history.
        """
        holdings = self._holdings.refresh_holdings() if include_holdings else []
        return self._analytics.calculate_portfolio_metrics(
            holdings,
            values,
            risk_free_rate=risk_free_rate,
            periods_per_year=periods_per_year,
        )

    def technical_analysis(
        self,
        symbol: str,
        range_spec: str = "3mo",
        options: Optional[IndicatorOptions] = None,
    ) -> TechnicalAnalysis:
        """
        Latest indicators and signals for symbol over range_spec.

        An empty or failed series yields no indicators and neutral signals.
        """
        bars = self._market.get_series(symbol, range_spec)
        indicators = self._technical.calculate_indicators(bars, options)
        last_price = bars[-1].close if bars else None
        return TechnicalAnalysis(
            symbol=symbol.upper(),
            last_price=last_price,
            indicators=indicators,
            signals=self._technical.signals(indicators, last_price),
            bars=len(bars),
        )
