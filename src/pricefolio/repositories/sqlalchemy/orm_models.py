"""SQLAlchemy ORM model definitions."""

from sqlalchemy import Column, String, DateTime, Text, Float

from pricefolio.core.timezone import now_utc
from pricefolio.repositories.sqlalchemy.database import Base


class KeyValueORM(Base):
    """SQLAlchemy model for a serialized key-value entry."""

    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=now_utc, onupdate=now_utc)


class HoldingORM(Base):
    """SQLAlchemy model for a holding."""

    __tablename__ = "holdings"

    symbol = Column(String(20), primary_key=True)
    quantity = Column(Float, nullable=False, default=0.0)
    average_price = Column(Float, nullable=False, default=0.0)
    currency = Column(String(10), nullable=False, default="USD")
    coin_id = Column(String(100), nullable=True)
    annual_dividend_income = Column(Float, nullable=True)
    dividend_yield = Column(Float, nullable=True)
