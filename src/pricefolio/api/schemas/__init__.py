"""Pydantic schemas for API request/response."""

from pricefolio.api.schemas.prices import (
    ResolvedPriceResponse,
    QuoteResponse,
    CachedPricesResponse,
    PurgeResponse,
)
from pricefolio.api.schemas.holdings import (
    HoldingUpsert,
    HoldingRecordResponse,
    HoldingResponse,
    AllocationItemResponse,
    AllocationResponse,
    ImportSummaryResponse,
)
from pricefolio.api.schemas.analytics import (
    PortfolioValueIn,
    PortfolioValueOut,
    MetricsRequest,
    HistoryRequest,
    PortfolioMetricsResponse,
    SnapshotResponse,
    TechnicalAnalysisResponse,
)

__all__ = [
    "ResolvedPriceResponse",
    "QuoteResponse",
    "CachedPricesResponse",
    "PurgeResponse",
    "HoldingUpsert",
    "HoldingRecordResponse",
    "HoldingResponse",
    "AllocationItemResponse",
    "AllocationResponse",
    "ImportSummaryResponse",
    "PortfolioValueIn",
    "PortfolioValueOut",
    "MetricsRequest",
    "HistoryRequest",
    "PortfolioMetricsResponse",
    "SnapshotResponse",
    "TechnicalAnalysisResponse",
]
