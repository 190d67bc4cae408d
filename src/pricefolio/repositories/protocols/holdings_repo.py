"""Holdings repository protocol."""

from typing import Protocol, Optional

from pricefolio.domain.models import HoldingRecord


class HoldingsRepository(Protocol):
    """Interface for holdings data access."""

    def list_holdings(self) -> list[HoldingRecord]:
        """Get all holdings, ordered by symbol."""
        ...

    def get(self, symbol: str) -> Optional[HoldingRecord]:
        """Get a holding by symbol."""
        ...

    def upsert(self, record: HoldingRecord) -> HoldingRecord:
        """Insert or update a holding."""
        ...

    def delete(self, symbol: str) -> bool:
        """Delete a holding. Returns False if it did not exist."""
        ...
