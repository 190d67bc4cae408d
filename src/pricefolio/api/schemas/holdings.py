"""Pydantic schemas for holdings endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class HoldingUpsert(BaseModel):
    """Request schema for creating or replacing a holding."""

    quantity: float = Field(..., ge=0)
    average_price: float = Field(..., ge=0)
    currency: str = Field("USD", min_length=1, max_length=10)
    coin_id: Optional[str] = None
    annual_dividend_income: Optional[float] = Field(None, ge=0)
    dividend_yield: Optional[float] = Field(None, ge=0)


class HoldingRecordResponse(BaseModel):
    """Response schema for a stored holding."""

    model_config = {"from_attributes": True}

    symbol: str
    quantity: float
    average_price: float
    currency: str
    coin_id: Optional[str] = None
    annual_dividend_income: Optional[float] = None
    dividend_yield: Optional[float] = None


class HoldingResponse(BaseModel):
    """Response schema for a holding with its resolved price."""

    model_config = {"from_attributes": True}

    symbol: str
    quantity: float
    average_price: float
    current_price: float
    change_percent: float
    market_value: float
    cost_basis: float
    has_price: bool
    currency: str
    annual_dividend_income: Optional[float] = None
    dividend_yield: Optional[float] = None


class AllocationItemResponse(BaseModel):
    """Response schema for a single allocation item."""

    model_config = {"from_attributes": True}

    symbol: str
    market_value: float
    percentage: float


class AllocationResponse(BaseModel):
    """Response schema for allocation breakdown."""

    model_config = {"from_attributes": True}

    items: list[AllocationItemResponse]
    total_value: float


class ImportSummaryResponse(BaseModel):
    """Response schema for CSV import results."""

    model_config = {"from_attributes": True}

    imported_count: int
    error_count: int
    errors: list[str]
