"""View models for price resolution."""

from dataclasses import dataclass

from pricefolio.domain.models.enums import PriceSource


@dataclass
class ResolvedPrice:
    """Best available price and 24h change for a symbol."""

    symbol: str
    price: float = 0.0
    change_percent: float = 0.0
    price_source: PriceSource = PriceSource.NONE
    change_source: PriceSource = PriceSource.NONE

    @property
    def is_known(self) -> bool:
        """A price of 0 means "unknown", not "worthless"."""
        return self.price > 0


@dataclass
class FormattedChange:
    """Display form of a percent change, e.g. "+2.35%"."""

    value: float
    formatted: str
    is_positive: bool
