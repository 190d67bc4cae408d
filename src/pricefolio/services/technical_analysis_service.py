"""Technical analysis service: latest indicator values plus qualitative signals."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, TypeVar

from pricefolio.domain.models import BollingerPosition, MacdSignal, PriceBar, RsiSignal
from pricefolio.domain.views import (
    BollingerBands,
    IndicatorResult,
    IndicatorSignals,
    MacdValue,
    TechnicalIndicators,
)
from pricefolio.services import indicators as formulas

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fraction of the half-band beyond which a price counts as "near" an edge
NEAR_BAND_THRESHOLD = 0.7


@dataclass
class IndicatorOptions:
    """Indicator periods. SMA/EMA are only computed for the periods listed."""

    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bb_period: int = 20
    bb_std_dev: float = 2.0
    sma_periods: list[int] = field(default_factory=list)
    ema_periods: list[int] = field(default_factory=list)
    stochastic_period: int = 14
    stochastic_signal_period: int = 3
    atr_period: int = 14
    adx_period: int = 14


def compute(name: str, fn: Callable[[], T]) -> IndicatorResult[T]:
    """Run one indicator computation, turning any error into a failure result."""
    try:
        return IndicatorResult.success(fn())
    except Exception as e:
        logger.warning("%s calculation failed: %s", name, e)
        return IndicatorResult.failure(str(e))


class TechnicalAnalysisService:
    """
    Computes the latest value of each technical indicator for a price series.

    Every indicator is computed independently: one failing (too few bars,
    bad parameters) never prevents the others, and the reason is kept in
    TechnicalIndicators.unavailable.
    """

    def calculate_indicators(
        self,
        series: Sequence[PriceBar],
        options: Optional[IndicatorOptions] = None,
    ) -> TechnicalIndicators:
        opts = options or IndicatorOptions()
        result = TechnicalIndicators()
        if not series:
            return result

        closes = [bar.close for bar in series]
        highs = [bar.high if bar.high is not None else bar.close for bar in series]
        lows = [bar.low if bar.low is not None else bar.close for bar in series]

        def record(name: str, outcome: IndicatorResult):
            if outcome.ok:
                return outcome.value
            result.unavailable[name] = outcome.error or "no value"
            return None

        result.rsi = record(
            "rsi", compute("RSI", lambda: formulas.rsi_series(closes, opts.rsi_period)[-1])
        )
        result.macd = record(
            "macd",
            compute(
                "MACD",
                lambda: formulas.macd(closes, opts.macd_fast, opts.macd_slow, opts.macd_signal),
            ),
        )
        result.bollinger_bands = record(
            "bollinger_bands",
            compute(
                "Bollinger Bands",
                lambda: formulas.bollinger_bands(closes, opts.bb_period, opts.bb_std_dev),
            ),
        )

        if opts.sma_periods:
            result.sma = self._moving_averages("sma", formulas.sma_series, closes, opts.sma_periods, result)
        if opts.ema_periods:
            result.ema = self._moving_averages("ema", formulas.ema_series, closes, opts.ema_periods, result)

        result.stochastic = record(
            "stochastic",
            compute(
                "Stochastic",
                lambda: formulas.stochastic(
                    highs, lows, closes, opts.stochastic_period, opts.stochastic_signal_period
                ),
            ),
        )
        result.atr = record(
            "atr", compute("ATR", lambda: formulas.atr(highs, lows, closes, opts.atr_period))
        )
        result.adx = record(
            "adx", compute("ADX", lambda: formulas.adx(highs, lows, closes, opts.adx_period))
        )

        return result

    @staticmethod
    def _moving_averages(
        name: str,
        fn: Callable[[Sequence[float], int], list[float]],
        closes: list[float],
        periods: Sequence[int],
        result: TechnicalIndicators,
    ) -> dict[int, float]:
        values: dict[int, float] = {}
        for period in periods:
            outcome = compute(f"{name.upper()}({period})", lambda: fn(closes, period)[-1])
            if outcome.ok:
                values[period] = outcome.value
            else:
                result.unavailable[f"{name}_{period}"] = outcome.error or "no value"
        return values

    # --- Signals ---

    @staticmethod
    def rsi_signal(rsi: Optional[float]) -> RsiSignal:
        if rsi is None:
            return RsiSignal.NEUTRAL
        if rsi >= 70:
            return RsiSignal.OVERBOUGHT
        if rsi <= 30:
            return RsiSignal.OVERSOLD
        return RsiSignal.NEUTRAL

    @staticmethod
    def macd_signal(macd: Optional[MacdValue]) -> MacdSignal:
        if macd is None:
            return MacdSignal.NEUTRAL
        if macd.macd > macd.signal and macd.histogram > 0:
            return MacdSignal.BULLISH
        if macd.macd < macd.signal and macd.histogram < 0:
            return MacdSignal.BEARISH
        return MacdSignal.NEUTRAL

    @staticmethod
    def bollinger_position(price: float, bands: Optional[BollingerBands]) -> BollingerPosition:
        """Locate price relative to the bands and the 70% half-band thresholds."""
        if bands is None:
            return BollingerPosition.UNKNOWN
        if price > bands.upper:
            return BollingerPosition.ABOVE_UPPER
        if price < bands.lower:
            return BollingerPosition.BELOW_LOWER

        upper_range = bands.upper - bands.middle
        lower_range = bands.middle - bands.lower
        if price > bands.middle + upper_range * NEAR_BAND_THRESHOLD:
            return BollingerPosition.NEAR_UPPER
        if price < bands.middle - lower_range * NEAR_BAND_THRESHOLD:
            return BollingerPosition.NEAR_LOWER
        return BollingerPosition.MIDDLE

    def signals(self, indicators: TechnicalIndicators, price: Optional[float]) -> IndicatorSignals:
        """Qualitative reading of a set of indicators at the given price."""
        return IndicatorSignals(
            rsi=self.rsi_signal(indicators.rsi),
            macd=self.macd_signal(indicators.macd),
            bollinger=(
                self.bollinger_position(price, indicators.bollinger_bands)
                if price is not None
                else BollingerPosition.UNKNOWN
            ),
        )
