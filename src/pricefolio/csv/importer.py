"""CSV import of holdings."""

import csv
import io
import math
from pathlib import Path
from typing import Optional, TextIO

from pricefolio.core.exceptions import ValidationError
from pricefolio.core.symbols import normalize_symbol
from pricefolio.domain.models import HoldingRecord
from pricefolio.domain.views import ImportSummary
from pricefolio.repositories.protocols import HoldingsRepository


# Required CSV columns
CSV_COLUMNS = [
    "symbol",
    "quantity",
    "average_price",
]

# Optional CSV columns
OPTIONAL_COLUMNS = [
    "currency",
    "coin_id",
    "annual_dividend_income",
    "dividend_yield",
]


class CsvHoldingsImporter:
    """
    CSV importer for bulk holdings loading.

    Expected format: symbol, quantity, average_price
    [, currency, coin_id, annual_dividend_income, dividend_yield]
    Each row upserts one holding; a later row for the same symbol wins.
    """

    def __init__(self, repository: HoldingsRepository):
        self._repo = repository

    def import_csv(self, path: str) -> ImportSummary:
        """Import holdings from a CSV file."""
        file_path = Path(path)
        if not file_path.exists():
            raise ValidationError(f"File not found: {path}")

        with open(file_path, newline="", encoding="utf-8") as csvfile:
            return self.import_stream(csvfile)

    def import_text(self, text: str) -> ImportSummary:
        """Import holdings from CSV content."""
        return self.import_stream(io.StringIO(text))

    def import_stream(self, stream: TextIO) -> ImportSummary:
        """
        Import holdings from an open CSV stream.

        Returns summary with imported/error counts; bad rows are reported,
        not fatal. Missing required columns abort the import.
        """
        summary = ImportSummary()
        reader = csv.DictReader(stream)

        # Validate columns
        if reader.fieldnames:
            missing = set(CSV_COLUMNS) - {f.strip() for f in reader.fieldnames}
            if missing:
                raise ValidationError(f"Missing required columns: {sorted(missing)}")

        for row_num, row in enumerate(reader, start=2):  # Start at 2 (header is row 1)
            try:
                self._repo.upsert(self._parse_row(row))
                summary.imported_count += 1
            except ValidationError as e:
                summary.error_count += 1
                summary.errors.append(f"Row {row_num}: {e.message}")

        return summary

    def _parse_row(self, row: dict[str, str]) -> HoldingRecord:
        """Parse a single CSV row into a HoldingRecord."""
        row = {(k or "").strip(): v for k, v in row.items()}

        symbol = normalize_symbol(row.get("symbol"))
        if not symbol:
            raise ValidationError("Missing symbol")

        quantity = self._parse_float(row.get("quantity"), "quantity")
        average_price = self._parse_float(row.get("average_price"), "average_price")
        if quantity is None or average_price is None:
            raise ValidationError("quantity and average_price are required")
        if quantity < 0:
            raise ValidationError(f"Negative quantity: {quantity}")
        if average_price < 0:
            raise ValidationError(f"Negative average_price: {average_price}")

        return HoldingRecord(
            symbol=symbol,
            quantity=quantity,
            average_price=average_price,
            currency=(row.get("currency") or "").strip().upper() or "USD",
            coin_id=(row.get("coin_id") or "").strip() or None,
            annual_dividend_income=self._parse_float(
                row.get("annual_dividend_income"), "annual_dividend_income"
            ),
            dividend_yield=self._parse_float(row.get("dividend_yield"), "dividend_yield"),
        )

    @staticmethod
    def _parse_float(value: Optional[str], field: str) -> Optional[float]:
        """Parse a number from string, returning None for empty strings."""
        value = value.strip() if value else ""
        if not value:
            return None
        try:
            number = float(value.replace(",", ""))
        except ValueError:
            raise ValidationError(f"Invalid {field}: {value}")
        if not math.isfinite(number):
            raise ValidationError(f"Invalid {field}: {value}")
        return number
