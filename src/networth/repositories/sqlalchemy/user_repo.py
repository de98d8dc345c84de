"""SQLAlchemy implementation of UserRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from networth.core.timezone import UTC, now_utc, to_naive_utc
from networth.domain.models import User
from networth.repositories.sqlalchemy.orm_models import UserORM


class SqlAlchemyUserRepository:
    """SQLAlchemy-backed user repository."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, user: User) -> User:
        """Persist a new user."""
        orm_user = UserORM(
            user_id=user.user_id,
            name=user.name,
            base_currency=user.base_currency,
            created_at=to_naive_utc(user.created_at or now_utc()),
        )
        self._db.add(orm_user)
        self._db.commit()
        self._db.refresh(orm_user)
        return self._to_domain(orm_user)

    def get_by_id(self, user_id: str) -> Optional[User]:
        """Retrieve user by ID."""
        orm_user = self._db.query(UserORM).filter(UserORM.user_id == user_id).first()
        return self._to_domain(orm_user) if orm_user else None

    def list_all(self) -> list[User]:
        """List all users."""
        return [self._to_domain(u) for u in self._db.query(UserORM).order_by(UserORM.name).all()]

    @staticmethod
    def _to_domain(orm: UserORM) -> User:
        return User(
            user_id=orm.user_id,
            name=orm.name,
            base_currency=orm.base_currency,
            created_at=UTC.localize(orm.created_at) if orm.created_at else None,
        )
