"""CSV import utilities."""

from pricefolio.csv.importer import CsvHoldingsImporter

__all__ = [
    "CsvHoldingsImporter",
]
