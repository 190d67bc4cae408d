"""Display helpers for prices and percent changes."""

from typing import Optional, Union

from pricefolio.core.numbers import as_finite, as_positive_price
from pricefolio.domain.views import FormattedChange

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def format_price(price: Optional[float], currency: str = "USD") -> Optional[str]:
    """
    Format a price with its currency symbol, e.g. "$51,200.00".

    Sub-dollar prices keep up to 6 decimals ("$0.000123"). Unknown prices
    (None or 0) return None. Unrecognized currencies fall back to "$".
    """
    value = as_positive_price(price)
    if value is None:
        return None

    symbol = CURRENCY_SYMBOLS.get(currency.upper(), "$")
    if value < 1:
        text = f"{value:,.6f}".rstrip("0")
        # Keep at least two decimals
        whole, _, decimals = text.partition(".")
        text = f"{whole}.{decimals.ljust(2, '0')}"
    else:
        text = f"{value:,.2f}"
    return f"{symbol}{text}"


def format_change(change: Optional[float]) -> Optional[FormattedChange]:
    """Format a percent change with an explicit sign, e.g. "-1.50%"."""
    value = as_finite(change)
    if value is None:
        return None
    is_positive = value >= 0
    sign = "+" if is_positive else "-"
    return FormattedChange(value=value, formatted=f"{sign}{abs(value):.2f}%", is_positive=is_positive)


def calculate_usd_value(price: Optional[float], amount: Union[str, float, int]) -> Optional[float]:
    """USD value of amount units at price; None if the price is unknown or amount unparsable."""
    value = as_positive_price(price)
    if value is None:
        return None
    if isinstance(amount, str):
        try:
            amount = float(amount)
        except ValueError:
            return None
    quantity = as_finite(amount)
    if quantity is None:
        return None
    return value * quantity
