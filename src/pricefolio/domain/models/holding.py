"""Holding models."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class HoldingRecord:
    """Position as supplied by the holdings provider (read-only for the core)."""

    symbol: str
    quantity: float
    average_price: float
    currency: str = "USD"
    coin_id: Optional[str] = None
    annual_dividend_income: Optional[float] = None
    dividend_yield: Optional[float] = None


@dataclass
class Holding:
    """
    Position enriched with a resolved price.

    market_value and cost_basis are derived on access, never stored.
    """

    symbol: str
    quantity: float
    average_price: float
    current_price: float = 0.0
    change_percent: float = 0.0
    currency: str = "USD"
    annual_dividend_income: Optional[float] = None
    dividend_yield: Optional[float] = None

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.average_price

    @property
    def has_price(self) -> bool:
        """False when the price is unknown (resolved to 0)."""
        return self.current_price > 0
