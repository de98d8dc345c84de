"""SQLAlchemy repository implementations."""

from networth.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    get_session,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from networth.repositories.sqlalchemy.account_repo import SqlAlchemyAccountRepository
from networth.repositories.sqlalchemy.holding_repo import SqlAlchemyHoldingRepository
from networth.repositories.sqlalchemy.user_repo import SqlAlchemyUserRepository
from networth.repositories.sqlalchemy.rate_cache_repo import SqlAlchemyRateCacheRepository
from networth.repositories.sqlalchemy.snapshot_repo import SqlAlchemySnapshotRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyAccountRepository",
    "SqlAlchemyHoldingRepository",
    "SqlAlchemyUserRepository",
    "SqlAlchemyRateCacheRepository",
    "SqlAlchemySnapshotRepository",
]
