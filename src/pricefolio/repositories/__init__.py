"""Repository layer - data access abstractions and implementations."""

from pricefolio.repositories.protocols import (
    KeyValueStore,
    HoldingsRepository,
)

__all__ = [
    "KeyValueStore",
    "HoldingsRepository",
]
