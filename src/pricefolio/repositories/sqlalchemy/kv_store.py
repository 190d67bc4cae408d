"""SQLAlchemy implementation of KeyValueStore."""

from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from pricefolio.repositories.sqlalchemy.database import session_scope
from pricefolio.repositories.sqlalchemy.orm_models import KeyValueORM


class SqlAlchemyKeyValueStore:
    """
    SQLAlchemy-backed key-value store.

    Bound to a request Session, or to a session factory for stores that
    outlive a request (the process-wide price cache).
    """

    def __init__(self, db: Optional[Session] = None, session_factory: Optional[sessionmaker] = None):
        self._db = db
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with session_scope(self._db, self._session_factory) as db:
            orm_kv = db.query(KeyValueORM).filter(KeyValueORM.key == key).first()
            return orm_kv.value if orm_kv else None

    def set(self, key: str, value: str) -> None:
        with session_scope(self._db, self._session_factory) as db:
            orm_kv = db.query(KeyValueORM).filter(KeyValueORM.key == key).first()
            if orm_kv:
                orm_kv.value = value
            else:
                db.add(KeyValueORM(key=key, value=value))
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise
