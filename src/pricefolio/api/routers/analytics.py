"""Portfolio and technical analytics endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from pricefolio.api.deps import get_analysis_service, get_portfolio_analytics
from pricefolio.api.schemas import (
    HistoryRequest,
    MetricsRequest,
    PortfolioMetricsResponse,
    PortfolioValueOut,
    SnapshotResponse,
    TechnicalAnalysisResponse,
)
from pricefolio.core.exceptions import ValidationError
from pricefolio.domain.models import PortfolioValue
from pricefolio.services import AnalysisService, IndicatorOptions, PortfolioAnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _parse_periods(value: Optional[str], name: str) -> list[int]:
    if not value:
        return []
    try:
        periods = [int(p) for p in value.split(",") if p.strip()]
    except ValueError:
        raise ValidationError(f"Invalid {name} periods: {value}")
    if any(p <= 0 for p in periods):
        raise ValidationError(f"{name} periods must be positive: {value}")
    return periods


@router.get("/snapshot", response_model=SnapshotResponse)
def get_snapshot(
    analysis: AnalysisService = Depends(get_analysis_service),
) -> SnapshotResponse:
    """Capital gains, dividends, weights and diversification of current holdings."""
    return SnapshotResponse.model_validate(analysis.portfolio_snapshot())


@router.post("/metrics", response_model=PortfolioMetricsResponse)
def calculate_metrics(
    request: MetricsRequest,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> PortfolioMetricsResponse:
    """Performance metrics from a posted value history, optionally combined with holdings."""
    values = [PortfolioValue(timestamp=v.timestamp, value=v.value) for v in request.values]
    metrics = analysis.portfolio_metrics(
        values,
        risk_free_rate=request.risk_free_rate,
        periods_per_year=request.periods_per_year,
        include_holdings=request.include_holdings,
    )
    return PortfolioMetricsResponse.model_validate(metrics)


@router.post("/history", response_model=list[PortfolioValueOut])
def generate_history(
    request: HistoryRequest,
    analytics: PortfolioAnalyticsService = Depends(get_portfolio_analytics),
) -> list[PortfolioValueOut]:
    """Compound periodic returns into a value history."""
    history = analytics.generate_portfolio_history(
        request.initial_value,
        request.returns,
        request.start_timestamp,
        request.interval_ms,
    )
    return [PortfolioValueOut.model_validate(p) for p in history]


@router.get("/indicators/{symbol}", response_model=TechnicalAnalysisResponse)
def get_indicators(
    symbol: str,
    range_spec: str = Query("3mo", alias="range", description="1d, 7d, 1mo, 3mo or 1y"),
    sma: Optional[str] = Query(None, description="Comma-separated SMA periods"),
    ema: Optional[str] = Query(None, description="Comma-separated EMA periods"),
    analysis: AnalysisService = Depends(get_analysis_service),
) -> TechnicalAnalysisResponse:
    """Latest technical indicators and signals for a symbol."""
    options = IndicatorOptions(
        sma_periods=_parse_periods(sma, "SMA"),
        ema_periods=_parse_periods(ema, "EMA"),
    )
    result = analysis.technical_analysis(symbol, range_spec, options)
    return TechnicalAnalysisResponse.model_validate(result)
