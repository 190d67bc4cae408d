"""View models for service outputs."""

from pricefolio.domain.views.prices import ResolvedPrice, FormattedChange
from pricefolio.domain.views.indicators import (
    IndicatorResult,
    MacdValue,
    BollingerBands,
    StochasticValue,
    TechnicalIndicators,
    IndicatorSignals,
    TechnicalAnalysis,
)
from pricefolio.domain.views.analytics import (
    HoldingPerformance,
    Diversification,
    SnapshotMetrics,
    PortfolioMetrics,
    AllocationItem,
    AllocationView,
    ImportSummary,
)

__all__ = [
    "ResolvedPrice",
    "FormattedChange",
    "IndicatorResult",
    "MacdValue",
    "BollingerBands",
    "StochasticValue",
    "TechnicalIndicators",
    "IndicatorSignals",
    "TechnicalAnalysis",
    "HoldingPerformance",
    "Diversification",
    "SnapshotMetrics",
    "PortfolioMetrics",
    "AllocationItem",
    "AllocationView",
    "ImportSummary",
]
