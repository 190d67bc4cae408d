"""SQLAlchemy implementation of HoldingsRepository."""

from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from pricefolio.core.symbols import normalize_symbol
from pricefolio.domain.models import HoldingRecord
from pricefolio.repositories.sqlalchemy.database import session_scope
from pricefolio.repositories.sqlalchemy.orm_models import HoldingORM


class SqlAlchemyHoldingsRepository:
    """SQLAlchemy-backed holdings repository, keyed by normalized symbol."""

    def __init__(self, db: Optional[Session] = None, session_factory: Optional[sessionmaker] = None):
        self._db = db
        self._session_factory = session_factory

    def list_holdings(self) -> list[HoldingRecord]:
        """Get all holdings, ordered by symbol."""
        with session_scope(self._db, self._session_factory) as db:
            orm_holdings = db.query(HoldingORM).order_by(HoldingORM.symbol).all()
            return [self._to_domain(h) for h in orm_holdings]

    def get(self, symbol: str) -> Optional[HoldingRecord]:
        """Get a holding by symbol."""
        with session_scope(self._db, self._session_factory) as db:
            orm_holding = (
                db.query(HoldingORM)
                .filter(HoldingORM.symbol == normalize_symbol(symbol))
                .first()
            )
            return self._to_domain(orm_holding) if orm_holding else None

    def upsert(self, record: HoldingRecord) -> HoldingRecord:
        """Insert or update a holding."""
        symbol = normalize_symbol(record.symbol)
        with session_scope(self._db, self._session_factory) as db:
            orm_holding = db.query(HoldingORM).filter(HoldingORM.symbol == symbol).first()

            if orm_holding is None:
                orm_holding = HoldingORM(symbol=symbol)
                db.add(orm_holding)

            orm_holding.quantity = record.quantity
            orm_holding.average_price = record.average_price
            orm_holding.currency = record.currency
            orm_holding.coin_id = record.coin_id
            orm_holding.annual_dividend_income = record.annual_dividend_income
            orm_holding.dividend_yield = record.dividend_yield

            db.commit()
            db.refresh(orm_holding)
            return self._to_domain(orm_holding)

    def delete(self, symbol: str) -> bool:
        """Delete a holding. Returns False if it did not exist."""
        with session_scope(self._db, self._session_factory) as db:
            deleted = (
                db.query(HoldingORM)
                .filter(HoldingORM.symbol == normalize_symbol(symbol))
                .delete()
            )
            db.commit()
            return deleted > 0

    @staticmethod
    def _to_domain(orm: HoldingORM) -> HoldingRecord:
        """Convert ORM holding to domain model."""
        return HoldingRecord(
            symbol=orm.symbol,
            quantity=float(orm.quantity or 0.0),
            average_price=float(orm.average_price or 0.0),
            currency=orm.currency or "USD",
            coin_id=orm.coin_id,
            annual_dividend_income=orm.annual_dividend_income,
            dividend_yield=orm.dividend_yield,
        )
