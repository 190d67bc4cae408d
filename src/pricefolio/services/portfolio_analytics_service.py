"""Portfolio analytics: snapshot metrics from holdings, performance metrics from value history."""

import math
from typing import Optional, Sequence

from pricefolio.core.numbers import as_finite, safe_ratio
from pricefolio.core.timezone import MS_PER_DAY
from pricefolio.domain.models import Holding, PortfolioValue
from pricefolio.domain.views import (
    Diversification,
    HoldingPerformance,
    PortfolioMetrics,
    SnapshotMetrics,
)

DAYS_PER_YEAR = 365.25
DEFAULT_PERIODS_PER_YEAR = 252


class PortfolioAnalyticsService:
    """
    Stateless portfolio analytics.

    Two modes, usable separately or together:
    - snapshot: from current holdings only (capital gains, dividends, weights, HHI)
    - time series: from {timestamp, value} history (CAGR, volatility, drawdown, ratios)

    Percentages are expressed as 0-100 values. Any ratio whose denominator is
    zero is reported as None, never NaN or infinity.
    """

    def __init__(self, risk_free_rate: float = 0.02, periods_per_year: Optional[float] = None):
        self._risk_free_rate = risk_free_rate
        self._periods_per_year = periods_per_year

    # --- Snapshot mode ---

    def calculate_holding_performance(
        self,
        holdings: Sequence[Holding],
        total_portfolio_value: float,
    ) -> list[HoldingPerformance]:
        """Profit/loss and weight of each holding."""
        result = []
        for holding in holdings:
            cost_basis = holding.cost_basis
            current_value = holding.market_value
            profit_loss = current_value - cost_basis
            result.append(
                HoldingPerformance(
                    symbol=holding.symbol,
                    cost_basis=cost_basis,
                    current_value=current_value,
                    profit_loss=profit_loss,
                    profit_loss_percent=_percent(profit_loss, cost_basis),
                    weight=_percent(current_value, total_portfolio_value),
                )
            )
        return result

    def calculate_diversification(self, holdings: Sequence[HoldingPerformance]) -> Diversification:
        """
        Herfindahl-Hirschman concentration of holding weights.

        HHI = Σ(weight/100)², 1 for a single holding; effective holdings = 1/HHI.
        """
        if not holdings:
            return Diversification()

        hhi = sum((h.weight / 100) ** 2 for h in holdings)
        effective = 1 / hhi if hhi > 0 else float(len(holdings))
        return Diversification(
            concentration=hhi,
            effective_holdings=effective,
            top_holding_weight=max(h.weight for h in holdings),
        )

    def calculate_snapshot(self, holdings: Sequence[Holding]) -> SnapshotMetrics:
        """Metrics derived from current holdings only."""
        total_cost = sum(h.cost_basis for h in holdings)
        total_value = sum(h.market_value for h in holdings)
        dividend_income = sum(h.annual_dividend_income or 0.0 for h in holdings)

        capital_gains = total_value - total_cost
        total_return = capital_gains + dividend_income

        performance = self.calculate_holding_performance(holdings, total_value)
        return SnapshotMetrics(
            total_cost_basis=total_cost,
            total_value=total_value,
            capital_gains=capital_gains,
            capital_gains_percent=_percent(capital_gains, total_cost),
            dividend_income=dividend_income,
            dividend_yield=_percent(dividend_income, total_value),
            total_return=total_return,
            total_return_percent=_percent(total_return, total_cost),
            holdings=performance,
            diversification=self.calculate_diversification(performance),
        )

    # --- Time-series mode ---

    def calculate_metrics(
        self,
        values: Sequence[PortfolioValue],
        risk_free_rate: Optional[float] = None,
        periods_per_year: Optional[float] = None,
    ) -> PortfolioMetrics:
        """
        Performance metrics from a portfolio value history.

        Points with a non-finite value or timestamp are dropped. Fewer than
        two usable points yields an all-zero result. periods_per_year
        overrides the sampling density estimated from the timestamps.
        """
        usable = [
            v for v in values or ()
            if as_finite(v.value) is not None and as_finite(v.timestamp) is not None
        ]
        if len(usable) < 2:
            return PortfolioMetrics()

        rf = self._risk_free_rate if risk_free_rate is None else risk_free_rate
        declared_ppy = periods_per_year if periods_per_year is not None else self._periods_per_year

        ordered = sorted(usable, key=lambda v: v.timestamp)
        initial = ordered[0].value
        final = ordered[-1].value

        total_return = final - initial
        total_return_percent = _percent(total_return, initial) if initial > 0 else 0.0

        returns = [
            (ordered[i].value - ordered[i - 1].value) / ordered[i - 1].value
            for i in range(1, len(ordered))
            if ordered[i - 1].value > 0
        ]

        days = (ordered[-1].timestamp - ordered[0].timestamp) / MS_PER_DAY
        years = days / DAYS_PER_YEAR
        ppy = declared_ppy or _estimate_periods_per_year(len(returns), days)

        cagr = None
        if years > 0 and initial > 0 and final >= 0:
            try:
                cagr = ((final / initial) ** (1 / years) - 1) * 100
            except OverflowError:
                # Sub-day histories compound into numbers too large to display
                cagr = None

        volatility = None
        if len(returns) > 1:
            mean = sum(returns) / len(returns)
            variance = sum((r - mean) ** 2 for r in returns) / (len(returns) - 1)
            volatility = math.sqrt(variance) * math.sqrt(ppy) * 100

        max_drawdown, max_drawdown_percent = _max_drawdown(ordered)

        sharpe = None
        if volatility and cagr is not None:
            sharpe = safe_ratio(cagr - rf * 100, volatility)

        sortino = None
        negative = [r for r in returns if r < 0]
        if len(returns) > 1 and cagr is not None and negative:
            downside_dev = math.sqrt(sum(r ** 2 for r in negative) / len(negative))
            sortino = safe_ratio(cagr / 100 - rf, downside_dev * math.sqrt(ppy))

        wins = [r for r in returns if r > 0]
        win_rate = len(wins) / len(returns) * 100 if returns else None
        average_win = sum(wins) / len(wins) * 100 if wins else None
        average_loss = abs(sum(negative) / len(negative)) * 100 if negative else None

        profit_factor = None
        if wins and negative:
            profit_factor = safe_ratio(sum(wins), abs(sum(negative)))

        calmar = None
        if cagr is not None and max_drawdown_percent > 0:
            calmar = cagr / max_drawdown_percent

        return PortfolioMetrics(
            total_return=total_return,
            total_return_percent=total_return_percent,
            max_drawdown=max_drawdown,
            max_drawdown_percent=max_drawdown_percent,
            cagr=_finite_or_none(cagr),
            volatility=_finite_or_none(volatility),
            sharpe_ratio=sharpe,
            sortino_ratio=sortino,
            win_rate=win_rate,
            average_win=average_win,
            average_loss=average_loss,
            profit_factor=profit_factor,
            calmar_ratio=_finite_or_none(calmar),
        )

    def calculate_portfolio_metrics(
        self,
        holdings: Sequence[Holding] = (),
        values: Optional[Sequence[PortfolioValue]] = None,
        risk_free_rate: Optional[float] = None,
        periods_per_year: Optional[float] = None,
    ) -> PortfolioMetrics:
        """
        Combine snapshot and time-series metrics.

        Returns, capital gains and dividends come from holdings when any are
        given; drawdown, CAGR, volatility and the ratios come from the history.
        """
        metrics = (
            self.calculate_metrics(values, risk_free_rate, periods_per_year)
            if values
            else PortfolioMetrics()
        )
        if not holdings:
            return metrics

        snapshot = self.calculate_snapshot(holdings)
        metrics.total_return = snapshot.total_return
        metrics.total_return_percent = snapshot.total_return_percent
        metrics.capital_gains = snapshot.capital_gains
        metrics.capital_gains_percent = snapshot.capital_gains_percent
        metrics.dividend_income = snapshot.dividend_income
        metrics.dividend_yield = snapshot.dividend_yield
        return metrics

    @staticmethod
    def generate_portfolio_history(
        initial_value: float,
        returns: Sequence[float],
        start_timestamp: int,
        interval_ms: int = MS_PER_DAY,
    ) -> list[PortfolioValue]:
        """Compound periodic returns into a value history starting at initial_value."""
        history = [PortfolioValue(timestamp=start_timestamp, value=initial_value)]
        value = initial_value
        timestamp = start_timestamp
        for r in returns:
            value = value * (1 + r)
            timestamp += interval_ms
            history.append(PortfolioValue(timestamp=timestamp, value=value))
        return history


def _percent(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is zero."""
    ratio = safe_ratio(numerator, denominator)
    return ratio * 100 if ratio is not None else 0.0


def _estimate_periods_per_year(count: int, days: float) -> float:
    if days > 0:
        return count / days * DAYS_PER_YEAR
    return DEFAULT_PERIODS_PER_YEAR


def _max_drawdown(ordered: Sequence[PortfolioValue]) -> tuple[float, float]:
    """Largest peak-to-trough drop and its percentage of the peak at that point."""
    peak = ordered[0].value
    max_drawdown = 0.0
    max_drawdown_percent = 0.0
    for point in ordered[1:]:
        if point.value > peak:
            peak = point.value
        drawdown = peak - point.value
        if drawdown > max_drawdown:
            max_drawdown = drawdown
            max_drawdown_percent = drawdown / peak * 100 if peak > 0 else 0.0
    return max_drawdown, max_drawdown_percent


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value
