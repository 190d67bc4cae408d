"""Repository protocols (interfaces)."""

from pricefolio.repositories.protocols.kv_store import KeyValueStore
from pricefolio.repositories.protocols.holdings_repo import HoldingsRepository

__all__ = [
    "KeyValueStore",
    "HoldingsRepository",
]
