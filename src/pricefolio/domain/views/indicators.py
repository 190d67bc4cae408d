"""View models for technical indicators."""

from dataclasses import dataclass, field, asdict
from typing import Generic, Optional, TypeVar

from pricefolio.domain.models.enums import BollingerPosition, MacdSignal, RsiSignal

T = TypeVar("T")


@dataclass
class IndicatorResult(Generic[T]):
    """Outcome of one indicator: either a value or the reason it is missing."""

    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None

    @classmethod
    def success(cls, value: T) -> "IndicatorResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "IndicatorResult[T]":
        return cls(error=error)


@dataclass
class MacdValue:
    macd: float
    signal: float
    histogram: float


@dataclass
class BollingerBands:
    upper: float
    middle: float
    lower: float


@dataclass
class StochasticValue:
    k: float
    d: float


@dataclass
class TechnicalIndicators:
    """
    Latest value of each indicator.

    A field left as None is absent; `unavailable` records why.
    sma/ema are None unless periods were requested, and a requested period
    with too little data is simply missing from the mapping.
    """

    rsi: Optional[float] = None
    macd: Optional[MacdValue] = None
    bollinger_bands: Optional[BollingerBands] = None
    sma: Optional[dict[int, float]] = None
    ema: Optional[dict[int, float]] = None
    stochastic: Optional[StochasticValue] = None
    atr: Optional[float] = None
    adx: Optional[float] = None
    unavailable: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize, omitting absent indicators."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class IndicatorSignals:
    """Qualitative reading of the latest indicators."""

    rsi: RsiSignal = RsiSignal.NEUTRAL
    macd: MacdSignal = MacdSignal.NEUTRAL
    bollinger: BollingerPosition = BollingerPosition.UNKNOWN


@dataclass
class TechnicalAnalysis:
    """Indicators plus signals for one symbol."""

    symbol: str
    last_price: Optional[float]
    indicators: TechnicalIndicators
    signals: IndicatorSignals
    bars: int = 0
