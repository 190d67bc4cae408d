"""Holdings endpoints."""

from fastapi import APIRouter, Depends, File, UploadFile

from pricefolio.api.deps import (
    get_csv_importer,
    get_holdings_repo,
    get_holdings_service,
)
from pricefolio.api.schemas import (
    HoldingUpsert,
    HoldingRecordResponse,
    HoldingResponse,
    AllocationResponse,
    ImportSummaryResponse,
)
from pricefolio.core.exceptions import NotFoundError, ValidationError
from pricefolio.core.symbols import normalize_symbol
from pricefolio.csv import CsvHoldingsImporter
from pricefolio.domain.models import HoldingRecord
from pricefolio.repositories.sqlalchemy import SqlAlchemyHoldingsRepository
from pricefolio.services import HoldingsService

router = APIRouter(prefix="/holdings", tags=["holdings"])


@router.get("", response_model=list[HoldingResponse])
def list_holdings(
    holdings: HoldingsService = Depends(get_holdings_service),
) -> list[HoldingResponse]:
    """Get all holdings with freshly resolved prices."""
    return [HoldingResponse.model_validate(h) for h in holdings.refresh_holdings()]


@router.get("/records", response_model=list[HoldingRecordResponse])
def list_holding_records(
    repo: SqlAlchemyHoldingsRepository = Depends(get_holdings_repo),
) -> list[HoldingRecordResponse]:
    """Get stored holdings without fetching prices."""
    return [HoldingRecordResponse.model_validate(r) for r in repo.list_holdings()]


@router.get("/allocation", response_model=AllocationResponse)
def get_allocation(
    holdings: HoldingsService = Depends(get_holdings_service),
) -> AllocationResponse:
    """Get portfolio allocation breakdown."""
    return AllocationResponse.model_validate(holdings.allocation())


@router.put("/{symbol}", response_model=HoldingRecordResponse)
def upsert_holding(
    symbol: str,
    data: HoldingUpsert,
    repo: SqlAlchemyHoldingsRepository = Depends(get_holdings_repo),
) -> HoldingRecordResponse:
    """Create or replace a holding."""
    record = repo.upsert(
        HoldingRecord(
            symbol=normalize_symbol(symbol),
            quantity=data.quantity,
            average_price=data.average_price,
            currency=data.currency.upper(),
            coin_id=data.coin_id,
            annual_dividend_income=data.annual_dividend_income,
            dividend_yield=data.dividend_yield,
        )
    )
    return HoldingRecordResponse.model_validate(record)


@router.delete("/{symbol}", status_code=204)
def delete_holding(
    symbol: str,
    repo: SqlAlchemyHoldingsRepository = Depends(get_holdings_repo),
) -> None:
    """Delete a holding."""
    if not repo.delete(symbol):
        raise NotFoundError("Holding", normalize_symbol(symbol))


@router.post("/import", response_model=ImportSummaryResponse, status_code=201)
def import_holdings(
    file: UploadFile = File(...),
    importer: CsvHoldingsImporter = Depends(get_csv_importer),
) -> ImportSummaryResponse:
    """Bulk-import holdings from a CSV file (best-effort: bad rows are reported)."""
    raw = file.file.read()
    if not raw:
        raise ValidationError("Uploaded file is empty")
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("Uploaded file is not UTF-8 text")
    return ImportSummaryResponse.model_validate(importer.import_text(text))
