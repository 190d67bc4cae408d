"""
Unit tests for PortfolioAnalyticsService.

Tests cover:
- Snapshot metrics (capital gains, dividends, weights, diversification)
- Time-series metrics (CAGR, volatility, drawdown, ratios)
- Zero denominators producing None or 0, never NaN/inf
- Combined snapshot + history metrics
- Portfolio history generation from periodic returns
"""

import dataclasses
import math

import pytest

from pricefolio.core.timezone import MS_PER_DAY
from pricefolio.domain.models import Holding, PortfolioValue
from pricefolio.services import PortfolioAnalyticsService

from tests.conftest import FIXED_NOW_MS, make_values

ONE_YEAR_MS = int(365.25 * MS_PER_DAY)


def _assert_all_finite(metrics) -> None:
    for name, value in dataclasses.asdict(metrics).items():
        if isinstance(value, float):
            assert math.isfinite(value), f"{name} is {value}"


# =============================================================================
# SNAPSHOT TESTS
# =============================================================================


class TestSnapshot:
    """Tests for metrics derived from current holdings."""

    def test_single_btc_holding(self, analytics_service: PortfolioAnalyticsService, holding_factory):
        """
        GIVEN 1 BTC bought at 50,000 now priced at 60,000
        WHEN I calculate the snapshot
        THEN capital gains are 10,000 (20%) and the holding is the whole portfolio
        """
        snapshot = analytics_service.calculate_snapshot([holding_factory()])

        assert snapshot.total_cost_basis == 50000.0
        assert snapshot.total_value == 60000.0
        assert snapshot.capital_gains == 10000.0
        assert snapshot.capital_gains_percent == pytest.approx(20.0)
        assert snapshot.total_return == 10000.0
        assert snapshot.holdings[0].weight == pytest.approx(100.0)
        assert snapshot.holdings[0].profit_loss_percent == pytest.approx(20.0)
        assert snapshot.diversification.concentration == pytest.approx(1.0)
        assert snapshot.diversification.effective_holdings == pytest.approx(1.0)
        assert snapshot.diversification.top_holding_weight == pytest.approx(100.0)

    def test_equal_weights_diversification(self, analytics_service: PortfolioAnalyticsService, holding_factory):
        """
        GIVEN four holdings of equal value
        WHEN I calculate the snapshot
        THEN HHI is 0.25 and effective holdings is 4
        """
        holdings = [
            holding_factory(symbol=s, quantity=1, average_price=100.0, current_price=100.0)
            for s in ("A", "B", "C", "D")
        ]

        diversification = analytics_service.calculate_snapshot(holdings).diversification

        assert diversification.concentration == pytest.approx(0.25)
        assert diversification.effective_holdings == pytest.approx(4.0)
        assert diversification.top_holding_weight == pytest.approx(25.0)

    def test_dividends_add_to_total_return(self, analytics_service: PortfolioAnalyticsService, holding_factory):
        holdings = [
            holding_factory(symbol="AAPL", quantity=10, average_price=150.0, current_price=200.0,
                            annual_dividend_income=10.0),
        ]

        snapshot = analytics_service.calculate_snapshot(holdings)

        assert snapshot.capital_gains == pytest.approx(500.0)
        assert snapshot.dividend_income == pytest.approx(10.0)
        assert snapshot.dividend_yield == pytest.approx(0.5)
        assert snapshot.total_return == pytest.approx(510.0)
        assert snapshot.total_return_percent == pytest.approx(34.0)

    def test_zero_cost_basis_gives_zero_percent(self, analytics_service: PortfolioAnalyticsService, holding_factory):
        """
        GIVEN a holding acquired at zero cost
        WHEN I calculate the snapshot
        THEN the percentages are 0 rather than infinite
        """
        snapshot = analytics_service.calculate_snapshot([holding_factory(average_price=0.0)])

        assert snapshot.capital_gains == 60000.0
        assert snapshot.capital_gains_percent == 0.0
        assert snapshot.holdings[0].profit_loss_percent == 0.0
        _assert_all_finite(snapshot)

    def test_empty_holdings(self, analytics_service: PortfolioAnalyticsService):
        snapshot = analytics_service.calculate_snapshot([])

        assert snapshot.total_value == 0.0
        assert snapshot.holdings == []
        assert snapshot.diversification.concentration == 0.0

    def test_unpriced_holdings_have_zero_weight(self, analytics_service: PortfolioAnalyticsService, holding_factory):
        holdings = [holding_factory(current_price=0.0)]

        snapshot = analytics_service.calculate_snapshot(holdings)

        assert snapshot.total_value == 0.0
        assert snapshot.holdings[0].weight == 0.0
        assert snapshot.diversification.effective_holdings == 1.0


# =============================================================================
# TIME-SERIES TESTS
# =============================================================================


class TestTimeSeriesMetrics:
    """Tests for metrics derived from a value history."""

    def test_fewer_than_two_points_is_all_zero(self, analytics_service: PortfolioAnalyticsService):
        metrics = analytics_service.calculate_metrics(make_values([100.0]))

        assert metrics.total_return == 0.0
        assert metrics.max_drawdown == 0.0
        assert metrics.cagr is None
        assert metrics.volatility is None

    def test_non_finite_points_are_dropped(self, analytics_service: PortfolioAnalyticsService):
        """
        GIVEN daily values 100, NaN, 110
        WHEN I calculate metrics
        THEN the NaN point is ignored and the 10% gain is the only return
        """
        metrics = analytics_service.calculate_metrics(make_values([100.0, float("nan"), 110.0]))

        assert metrics.total_return == pytest.approx(10.0)
        assert metrics.win_rate == 100.0
        assert metrics.average_win == pytest.approx(10.0)
        assert metrics.max_drawdown == 0.0
        _assert_all_finite(metrics)

    def test_one_finite_point_is_all_zero(self, analytics_service: PortfolioAnalyticsService):
        metrics = analytics_service.calculate_metrics(make_values([100.0, float("inf")]))

        assert metrics.total_return == 0.0
        assert metrics.win_rate is None

    def test_max_drawdown(self, analytics_service: PortfolioAnalyticsService):
        """
        GIVEN values 100, 120, 80, 130
        WHEN I calculate metrics
        THEN max drawdown is 40 (33.33% of the 120 peak)
        """
        metrics = analytics_service.calculate_metrics(make_values([100.0, 120.0, 80.0, 130.0]))

        assert metrics.max_drawdown == pytest.approx(40.0)
        assert metrics.max_drawdown_percent == pytest.approx(100 / 3)
        assert metrics.total_return == pytest.approx(30.0)
        assert metrics.total_return_percent == pytest.approx(30.0)

    def test_cagr_over_one_year(self, analytics_service: PortfolioAnalyticsService):
        """
        GIVEN a value of 100 growing to 110 over exactly one year
        WHEN I calculate metrics
        THEN CAGR is 10%
        """
        values = [
            PortfolioValue(timestamp=FIXED_NOW_MS, value=100.0),
            PortfolioValue(timestamp=FIXED_NOW_MS + ONE_YEAR_MS, value=110.0),
        ]

        metrics = analytics_service.calculate_metrics(values)

        assert metrics.cagr == pytest.approx(10.0)
        assert metrics.volatility is None
        assert metrics.sharpe_ratio is None
        assert metrics.win_rate == pytest.approx(100.0)
        assert metrics.average_win == pytest.approx(10.0)

    def test_unsorted_values_are_ordered_by_timestamp(self, analytics_service: PortfolioAnalyticsService):
        values = make_values([100.0, 120.0, 80.0, 130.0])

        metrics = analytics_service.calculate_metrics(list(reversed(values)))

        assert metrics.max_drawdown == pytest.approx(40.0)

    def test_volatility_with_declared_periods(self, analytics_service: PortfolioAnalyticsService):
        """
        GIVEN returns of +10% and -10% and 252 periods per year
        WHEN I calculate metrics
        THEN volatility is the annualized sample standard deviation
        """
        metrics = analytics_service.calculate_metrics(make_values([100.0, 110.0, 99.0]), periods_per_year=252)

        assert metrics.volatility == pytest.approx(math.sqrt(0.02) * math.sqrt(252) * 100)
        assert metrics.win_rate == pytest.approx(50.0)
        assert metrics.average_win == pytest.approx(10.0)
        assert metrics.average_loss == pytest.approx(10.0)
        assert metrics.profit_factor == pytest.approx(1.0)

    def test_service_level_periods_per_year(self):
        service = PortfolioAnalyticsService(periods_per_year=12)

        metrics = service.calculate_metrics(make_values([100.0, 110.0, 99.0]))

        assert metrics.volatility == pytest.approx(math.sqrt(0.02) * math.sqrt(12) * 100)

    def test_sortino_none_without_losses(self, analytics_service: PortfolioAnalyticsService):
        metrics = analytics_service.calculate_metrics(make_values([100.0, 101.0, 103.0, 106.0]))

        assert metrics.sortino_ratio is None
        assert metrics.average_loss is None
        assert metrics.profit_factor is None
        assert metrics.calmar_ratio is None

    def test_sortino_and_calmar_with_losses(self, analytics_service: PortfolioAnalyticsService):
        metrics = analytics_service.calculate_metrics(make_values([100.0, 105.0, 102.0, 108.0, 104.0, 112.0]))

        assert metrics.sortino_ratio is not None
        assert metrics.calmar_ratio == pytest.approx(metrics.cagr / metrics.max_drawdown_percent)

    def test_risk_free_rate_override_shifts_sharpe(self, analytics_service: PortfolioAnalyticsService):
        values = make_values([100.0, 105.0, 102.0, 108.0])

        base = analytics_service.calculate_metrics(values, risk_free_rate=0.0)
        shifted = analytics_service.calculate_metrics(values, risk_free_rate=0.05)

        assert base.sharpe_ratio - shifted.sharpe_ratio == pytest.approx(5.0 / base.volatility)

    def test_zero_values_never_produce_nan(self, analytics_service: PortfolioAnalyticsService):
        """
        GIVEN a history starting at 0
        WHEN I calculate metrics
        THEN undefined ratios are None and every float is finite
        """
        metrics = analytics_service.calculate_metrics(make_values([0.0, 100.0, 50.0]))

        assert metrics.total_return_percent == 0.0
        assert metrics.cagr is None
        _assert_all_finite(metrics)

    def test_flat_history(self, analytics_service: PortfolioAnalyticsService):
        metrics = analytics_service.calculate_metrics(make_values([100.0] * 5))

        assert metrics.volatility == 0.0
        assert metrics.sharpe_ratio is None
        assert metrics.win_rate == 0.0
        _assert_all_finite(metrics)

    def test_sub_day_history_does_not_overflow(self, analytics_service: PortfolioAnalyticsService):
        values = make_values([100.0, 1000.0], interval_ms=1)

        metrics = analytics_service.calculate_metrics(values)

        assert metrics.cagr is None
        _assert_all_finite(metrics)


# =============================================================================
# COMBINED METRICS TESTS
# =============================================================================


class TestCombinedMetrics:
    """Tests for calculate_portfolio_metrics()."""

    def test_holdings_override_returns(self, analytics_service: PortfolioAnalyticsService, holding_factory):
        """
        GIVEN holdings and a value history
        WHEN I calculate combined metrics
        THEN returns and gains come from holdings, drawdown from the history
        """
        metrics = analytics_service.calculate_portfolio_metrics(
            [holding_factory(annual_dividend_income=100.0)],
            make_values([100.0, 120.0, 80.0, 130.0]),
        )

        assert metrics.capital_gains == 10000.0
        assert metrics.dividend_income == 100.0
        assert metrics.total_return == 10100.0
        assert metrics.max_drawdown == pytest.approx(40.0)

    def test_history_only(self, analytics_service: PortfolioAnalyticsService):
        metrics = analytics_service.calculate_portfolio_metrics(values=make_values([100.0, 120.0]))

        assert metrics.total_return == pytest.approx(20.0)
        assert metrics.capital_gains == 0.0

    def test_holdings_only(self, analytics_service: PortfolioAnalyticsService, holding_factory):
        metrics = analytics_service.calculate_portfolio_metrics([holding_factory()])

        assert metrics.capital_gains_percent == pytest.approx(20.0)
        assert metrics.cagr is None
        assert metrics.max_drawdown == 0.0


# =============================================================================
# HISTORY GENERATION TESTS
# =============================================================================


class TestGeneratePortfolioHistory:
    """Tests for generate_portfolio_history()."""

    def test_compounds_returns(self):
        history = PortfolioAnalyticsService.generate_portfolio_history(100.0, [0.1, -0.5], FIXED_NOW_MS)

        assert [p.value for p in history] == pytest.approx([100.0, 110.0, 55.0])
        assert [p.timestamp for p in history] == [
            FIXED_NOW_MS,
            FIXED_NOW_MS + MS_PER_DAY,
            FIXED_NOW_MS + 2 * MS_PER_DAY,
        ]

    def test_no_returns_gives_single_point(self):
        history = PortfolioAnalyticsService.generate_portfolio_history(100.0, [], FIXED_NOW_MS)

        assert history == [PortfolioValue(timestamp=FIXED_NOW_MS, value=100.0)]

    def test_custom_interval(self):
        history = PortfolioAnalyticsService.generate_portfolio_history(1.0, [0.0, 0.0], 0, interval_ms=1000)

        assert [p.timestamp for p in history] == [0, 1000, 2000]
