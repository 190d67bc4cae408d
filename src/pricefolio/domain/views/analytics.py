"""View models for portfolio analytics outputs."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class HoldingPerformance:
    """Profit/loss and portfolio weight of a single holding."""

    symbol: str
    cost_basis: float
    current_value: float
    profit_loss: float
    profit_loss_percent: float
    weight: float  # Portfolio weight percentage


@dataclass
class Diversification:
    """Concentration measures derived from holding weights."""

    concentration: float = 0.0  # HHI, 0-1 (1 = single holding)
    effective_holdings: float = 0.0
    top_holding_weight: float = 0.0


@dataclass
class SnapshotMetrics:
    """Metrics computed from current holdings only."""

    total_cost_basis: float = 0.0
    total_value: float = 0.0
    capital_gains: float = 0.0
    capital_gains_percent: float = 0.0
    dividend_income: float = 0.0
    dividend_yield: float = 0.0
    total_return: float = 0.0
    total_return_percent: float = 0.0
    holdings: list[HoldingPerformance] = field(default_factory=list)
    diversification: Diversification = field(default_factory=Diversification)


@dataclass
class PortfolioMetrics:
    """
    Performance metrics snapshot.

    Optional ratios are None whenever their denominator is zero or their
    inputs are undefined; they are never NaN or infinite.
    """

    total_return: float = 0.0
    total_return_percent: float = 0.0
    capital_gains: float = 0.0
    capital_gains_percent: float = 0.0
    dividend_income: float = 0.0
    dividend_yield: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    cagr: Optional[float] = None
    volatility: Optional[float] = None
    sharpe_ratio: Optional[float] = None
    sortino_ratio: Optional[float] = None
    win_rate: Optional[float] = None
    average_win: Optional[float] = None
    average_loss: Optional[float] = None
    profit_factor: Optional[float] = None
    calmar_ratio: Optional[float] = None


@dataclass
class AllocationItem:
    """Single item in allocation breakdown."""

    symbol: str
    market_value: float
    percentage: float


@dataclass
class AllocationView:
    """Portfolio allocation breakdown."""

    items: list[AllocationItem] = field(default_factory=list)
    total_value: float = 0.0


@dataclass
class ImportSummary:
    """Summary of CSV import operation."""

    imported_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)
