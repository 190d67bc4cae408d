"""Ticker symbol normalization."""


def normalize_symbol(symbol) -> str:
    """Return the key form of a symbol: surrounding whitespace removed, upper-case."""
    return str(symbol or "").strip().upper()
