"""Pydantic schemas for analytics endpoints."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from pricefolio.core.timezone import MS_PER_DAY, parse_timestamp
from pricefolio.domain.models import BollingerPosition, MacdSignal, RsiSignal


class PortfolioValueIn(BaseModel):
    """One point of a portfolio value history."""

    timestamp: int = Field(..., description="Epoch milliseconds or an ISO date/datetime")
    value: float

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, v: Union[int, float, str, datetime]) -> int:
        try:
            return parse_timestamp(v)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid timestamp: {v}") from e


class PortfolioValueOut(BaseModel):
    model_config = {"from_attributes": True}

    timestamp: int
    value: float


class MetricsRequest(BaseModel):
    """Request schema for performance metrics."""

    values: list[PortfolioValueIn] = Field(default_factory=list)
    risk_free_rate: Optional[float] = None
    periods_per_year: Optional[float] = Field(None, gt=0)
    include_holdings: bool = False


class HistoryRequest(BaseModel):
    """Request schema for compounding periodic returns into a value history."""

    initial_value: float = Field(..., ge=0)
    returns: list[float]
    start_timestamp: int
    interval_ms: int = Field(MS_PER_DAY, gt=0)


class PortfolioMetricsResponse(BaseModel):
    """Response schema for performance metrics. Absent ratios are null."""

    model_config = {"from_attributes": True}

    total_return: float
    total_return_percent: float
    capital_gains: float
    capital_gains_percent: float
    dividend_income: float
    dividend_yield: float
    max_drawdown: float
    max_drawdown_percent: float
    cagr: Optional[float] = None
    volatility: Optional[float] = None
    sharpe_ratio: Optional[float] = None
    sortino_ratio: Optional[float] = None
    win_rate: Optional[float] = None
    average_win: Optional[float] = None
    average_loss: Optional[float] = None
    profit_factor: Optional[float] = None
    calmar_ratio: Optional[float] = None


class HoldingPerformanceResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    cost_basis: float
    current_value: float
    profit_loss: float
    profit_loss_percent: float
    weight: float


class DiversificationResponse(BaseModel):
    model_config = {"from_attributes": True}

    concentration: float
    effective_holdings: float
    top_holding_weight: float


class SnapshotResponse(BaseModel):
    """Response schema for holdings-only metrics."""

    model_config = {"from_attributes": True}

    total_cost_basis: float
    total_value: float
    capital_gains: float
    capital_gains_percent: float
    dividend_income: float
    dividend_yield: float
    total_return: float
    total_return_percent: float
    holdings: list[HoldingPerformanceResponse]
    diversification: DiversificationResponse


class MacdResponse(BaseModel):
    model_config = {"from_attributes": True}

    macd: float
    signal: float
    histogram: float


class BollingerBandsResponse(BaseModel):
    model_config = {"from_attributes": True}

    upper: float
    middle: float
    lower: float


class StochasticResponse(BaseModel):
    model_config = {"from_attributes": True}

    k: float
    d: float


class IndicatorsResponse(BaseModel):
    """Latest indicator values; unavailable maps indicator name -> reason."""

    model_config = {"from_attributes": True}

    rsi: Optional[float] = None
    macd: Optional[MacdResponse] = None
    bollinger_bands: Optional[BollingerBandsResponse] = None
    sma: Optional[dict[int, float]] = None
    ema: Optional[dict[int, float]] = None
    stochastic: Optional[StochasticResponse] = None
    atr: Optional[float] = None
    adx: Optional[float] = None
    unavailable: dict[str, str] = Field(default_factory=dict)


class SignalsResponse(BaseModel):
    model_config = {"from_attributes": True}

    rsi: RsiSignal
    macd: MacdSignal
    bollinger: BollingerPosition


class TechnicalAnalysisResponse(BaseModel):
    """Response schema for technical analysis of one symbol."""

    model_config = {"from_attributes": True}

    symbol: str
    last_price: Optional[float] = None
    bars: int
    indicators: IndicatorsResponse
    signals: SignalsResponse
