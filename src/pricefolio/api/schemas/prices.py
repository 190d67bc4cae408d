"""Pydantic schemas for price endpoints."""

from typing import Optional

from pydantic import BaseModel

from pricefolio.domain.models import PriceSource


class ResolvedPriceResponse(BaseModel):
    """Response schema for a resolved price."""

    model_config = {"from_attributes": True}

    symbol: str
    price: float
    change_percent: float
    price_source: PriceSource
    change_source: PriceSource
    is_known: bool
    formatted_price: Optional[str] = None
    formatted_change: Optional[str] = None


class QuoteResponse(BaseModel):
    """Response schema for a live quote."""

    model_config = {"from_attributes": True}

    symbol: str
    price: float
    change_percent: float
    currency: str
    timestamp: Optional[int] = None
    dividend_yield: Optional[float] = None
    name: Optional[str] = None


class CachedPricesResponse(BaseModel):
    """Response schema for the persistent price cache contents."""

    prices: dict[str, float]
    ttl_seconds: int


class PurgeResponse(BaseModel):
    """Response schema for a cache sweep."""

    purged: int
