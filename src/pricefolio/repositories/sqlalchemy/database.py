"""Database connection and session management."""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterator, Optional

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from pricefolio.config.settings import get_settings

Base = declarative_base()

# Module-level database state (can be reconfigured at runtime)
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _configure(url: str) -> None:
    global _engine, _SessionLocal
    _engine = create_engine(
        url,
        connect_args={"check_same_thread": False},  # SQLite-specific
        echo=False,
    )
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)


def get_engine() -> Engine:
    """Get or create the database engine."""
    if _engine is None:
        _configure(get_settings().get_database_url())
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    if _SessionLocal is None:
        _configure(get_settings().get_database_url())
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(
    db: Optional[Session] = None,
    session_factory: Optional[sessionmaker] = None,
) -> Iterator[Session]:
    """
    Yield the bound session, or a short-lived one from session_factory.

    A repository bound to a factory never shares a Session between calls,
    so one instance can be used from several threads.
    """
    if db is not None:
        yield db
        return
    if session_factory is None:
        raise ValueError("Either a session or a session factory is required")
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def init_db() -> None:
    """Initialize database tables."""
    from pricefolio.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def init_db_with_path(db_path: Path) -> None:
    """Point the module-level engine at a SQLite file and create its tables."""
    reset_database()
    _configure(f"sqlite:///{db_path}")
    init_db()


def reset_database() -> None:
    """Reset database state (for reconfiguration)."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
