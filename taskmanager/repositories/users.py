"""Account persistence: the store protocol the auth service depends on, and its SQLAlchemy implementation."""

from typing import Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmanager.models.user import User


class AccountStore(Protocol):
    """Lookup and write operations on account records."""

    def find_by_email(self, normalized_email: str) -> User | None: ...

    def find_by_id(self, account_id: int) -> User | None: ...

    def insert(self, account: User) -> User: ...

    def update(self, account: User) -> None: ...

    def list_all(self) -> list[User]: ...


class SqlAlchemyAccountStore:
    """AccountStore backed by a SQLAlchemy session. Each write commits; failures roll back and re-raise."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_email(self, normalized_email: str) -> User | None:
        return (
            self._session.query(User)
            .filter(func.lower(User.email) == normalized_email.lower())
            .first()
        )

    def find_by_id(self, account_id: int) -> User | None:
        return self._session.get(User, account_id)

    def insert(self, account: User) -> User:
        try:
            self._session.add(account)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise
        self._session.refresh(account)
        return account

    def update(self, account: User) -> None:
        try:
            self._session.add(account)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise

    def list_all(self) -> list[User]:
        return self._session.query(User).order_by(User.id).all()
