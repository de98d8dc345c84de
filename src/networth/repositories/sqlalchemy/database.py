"""Engine, session factory and schema creation for the net worth store."""

from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from networth.config.settings import get_settings

Base = declarative_base()

# Process-wide engine; rebound by init_db_with_path / reset_database
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None

# Seconds a SQLite writer waits on a lock held by another thread
SQLITE_BUSY_TIMEOUT = 30


def _build_engine(database_url: str) -> Engine:
    connect_args: dict = {}
    if database_url.startswith("sqlite"):
        # The scheduler thread and request threads share the file
        connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
    return create_engine(database_url, connect_args=connect_args, echo=False)


def _bind(database_url: str) -> Engine:
    global _engine, _SessionLocal
    _engine = _build_engine(database_url)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_engine() -> Engine:
    """Engine for the configured database URL, created on first use."""
    if _engine is None:
        return _bind(get_settings().get_database_url())
    return _engine


def get_session_factory() -> sessionmaker:
    if _SessionLocal is None:
        get_engine()
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def get_session() -> Session:
    """New session for work outside a request (scheduler jobs, AppContext)."""
    return get_session_factory()()


def _create_tables(engine: Engine) -> None:
    from networth.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def init_db() -> None:
    """Create users, ledger, rate cache and performance history tables."""
    _create_tables(get_engine())


def init_db_with_path(db_path: Path) -> None:
    """Point the store at a SQLite file and create its tables."""
    _create_tables(_bind(f"sqlite:///{db_path}"))


def reset_database() -> None:
    """Dispose the current engine so the next access rebinds from settings."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
