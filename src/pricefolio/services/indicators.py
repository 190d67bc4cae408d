"""Technical indicator formulas.

Pure computational functions over plain float sequences, used by
TechnicalAnalysisService. No I/O, no logging: a series that is too short
raises InsufficientDataError and invalid parameters raise ValueError, so the
caller can decide what "missing" means.

Conventions follow the common charting libraries:
- EMA is seeded with the SMA of the first `period` values, k = 2 / (period + 1)
- RSI, ATR and ADX use Wilder smoothing
- Bollinger Bands use the population standard deviation of the window
"""

import math
from typing import Sequence

from pricefolio.core.exceptions import InsufficientDataError
from pricefolio.domain.views import BollingerBands, MacdValue, StochasticValue


def _check_period(period: int) -> None:
    if period <= 0:
        raise ValueError(f"Period must be positive, got {period}")


def _require(values: Sequence[float], required: int) -> None:
    if len(values) < required:
        raise InsufficientDataError(required, len(values))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def sma_series(values: Sequence[float], period: int) -> list[float]:
    """Simple moving average; one value per full window."""
    _check_period(period)
    _require(values, period)

    window_sum = sum(values[:period])
    result = [window_sum / period]
    for i in range(period, len(values)):
        window_sum += values[i] - values[i - period]
        result.append(window_sum / period)
    return result


def ema_series(values: Sequence[float], period: int) -> list[float]:
    """Exponential moving average seeded with the SMA of the first window."""
    _check_period(period)
    _require(values, period)

    k = 2 / (period + 1)
    current = _mean(values[:period])
    result = [current]
    for value in values[period:]:
        current = (value - current) * k + current
        result.append(current)
    return result


def rsi_series(closes: Sequence[float], period: int = 14) -> list[float]:
    """Wilder's Relative Strength Index (requires period + 1 closes)."""
    _check_period(period)
    _require(closes, period + 1)

    changes = [closes[i] - closes[i - 1] for i in range(1, len(closes))]
    gains = [max(c, 0.0) for c in changes]
    losses = [max(-c, 0.0) for c in changes]

    avg_gain = _mean(gains[:period])
    avg_loss = _mean(losses[:period])
    result = [_rsi_value(avg_gain, avg_loss)]

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        result.append(_rsi_value(avg_gain, avg_loss))
    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        # Flat prices read as neutral, uninterrupted gains as 100
        return 50.0 if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def macd(
    closes: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MacdValue:
    """
    Latest MACD line, signal line and histogram.

    Needs slow_period closes for the MACD line; until slow_period +
    signal_period - 1 closes exist the signal line is not formed and
    signal/histogram are reported as 0.
    """
    _check_period(signal_period)
    if fast_period >= slow_period:
        raise ValueError(f"Fast period ({fast_period}) must be shorter than slow period ({slow_period})")

    fast = ema_series(closes, fast_period)
    slow = ema_series(closes, slow_period)
    offset = slow_period - fast_period
    macd_line = [fast[i + offset] - slow[i] for i in range(len(slow))]

    latest = macd_line[-1]
    if len(macd_line) < signal_period:
        return MacdValue(macd=latest, signal=0.0, histogram=0.0)

    signal = ema_series(macd_line, signal_period)[-1]
    return MacdValue(macd=latest, signal=signal, histogram=latest - signal)


def bollinger_bands(closes: Sequence[float], period: int = 20, std_dev: float = 2.0) -> BollingerBands:
    """Bollinger Bands of the latest window."""
    _check_period(period)
    _require(closes, period)

    window = closes[-period:]
    middle = _mean(window)
    deviation = math.sqrt(sum((x - middle) ** 2 for x in window) / period)
    return BollingerBands(
        upper=middle + std_dev * deviation,
        middle=middle,
        lower=middle - std_dev * deviation,
    )


def stochastic(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
    signal_period: int = 3,
) -> StochasticValue:
    """
    Latest %K and %D of the stochastic oscillator.

    %D is the SMA of the last signal_period %K values (0 until enough exist).
    A window with no high/low range reads as 50.
    """
    _check_period(period)
    _check_period(signal_period)
    _check_lengths(highs, lows, closes)
    _require(closes, period)

    k_values: list[float] = []
    for end in range(period, len(closes) + 1):
        highest = max(highs[end - period:end])
        lowest = min(lows[end - period:end])
        if highest == lowest:
            k_values.append(50.0)
        else:
            k_values.append((closes[end - 1] - lowest) / (highest - lowest) * 100)

    d = _mean(k_values[-signal_period:]) if len(k_values) >= signal_period else 0.0
    return StochasticValue(k=k_values[-1], d=d)


def true_ranges(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float]) -> list[float]:
    """True range per bar; the first bar uses high - low."""
    _check_lengths(highs, lows, closes)
    result: list[float] = []
    for i in range(len(closes)):
        if i == 0:
            result.append(highs[0] - lows[0])
            continue
        prev_close = closes[i - 1]
        result.append(
            max(
                highs[i] - lows[i],
                abs(highs[i] - prev_close),
                abs(lows[i] - prev_close),
            )
        )
    return result


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float:
    """Latest Average True Range (Wilder smoothing)."""
    _check_period(period)
    _require(closes, period)

    ranges = true_ranges(highs, lows, closes)
    current = _mean(ranges[:period])
    for tr in ranges[period:]:
        current = (current * (period - 1) + tr) / period
    return current


def adx(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float:
    """
    Latest Average Directional Index.

    The first ADX needs period directional movements to smooth plus period
    DX values to average, i.e. 2 * period bars.
    """
    _check_period(period)
    _check_lengths(highs, lows, closes)
    _require(closes, 2 * period)

    plus_dm: list[float] = []
    minus_dm: list[float] = []
    ranges: list[float] = []
    for i in range(1, len(closes)):
        up_move = highs[i] - highs[i - 1]
        down_move = lows[i - 1] - lows[i]
        plus_dm.append(up_move if up_move > down_move and up_move > 0 else 0.0)
        minus_dm.append(down_move if down_move > up_move and down_move > 0 else 0.0)
        ranges.append(
            max(
                highs[i] - lows[i],
                abs(highs[i] - closes[i - 1]),
                abs(lows[i] - closes[i - 1]),
            )
        )

    smoothed_tr = sum(ranges[:period])
    smoothed_plus = sum(plus_dm[:period])
    smoothed_minus = sum(minus_dm[:period])
    dx_values = [_dx(smoothed_plus, smoothed_minus, smoothed_tr)]

    for i in range(period, len(ranges)):
        smoothed_tr = smoothed_tr - smoothed_tr / period + ranges[i]
        smoothed_plus = smoothed_plus - smoothed_plus / period + plus_dm[i]
        smoothed_minus = smoothed_minus - smoothed_minus / period + minus_dm[i]
        dx_values.append(_dx(smoothed_plus, smoothed_minus, smoothed_tr))

    current = _mean(dx_values[:period])
    for dx in dx_values[period:]:
        current = (current * (period - 1) + dx) / period
    return current


def _dx(plus_dm: float, minus_dm: float, tr: float) -> float:
    if tr == 0:
        return 0.0
    plus_di = plus_dm / tr * 100
    minus_di = minus_dm / tr * 100
    di_sum = plus_di + minus_di
    if di_sum == 0:
        return 0.0
    return abs(plus_di - minus_di) / di_sum * 100


def _check_lengths(*series: Sequence[float]) -> None:
    lengths = {len(s) for s in series}
    if len(lengths) > 1:
        raise ValueError(f"High, low and close series differ in length: {sorted(lengths)}")
