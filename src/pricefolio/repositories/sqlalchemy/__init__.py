"""SQLAlchemy repository implementations."""

from pricefolio.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    init_db,
    init_db_with_path,
    reset_database,
    session_scope,
    Base,
)
from pricefolio.repositories.sqlalchemy.kv_store import SqlAlchemyKeyValueStore
from pricefolio.repositories.sqlalchemy.holdings_repo import SqlAlchemyHoldingsRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "session_scope",
    "Base",
    "SqlAlchemyKeyValueStore",
    "SqlAlchemyHoldingsRepository",
]
