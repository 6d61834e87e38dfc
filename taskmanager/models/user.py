"""ORM model for registered accounts (authentication and role-based access)."""

import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from taskmanager.models.base import Base


class Role(enum.StrEnum):
    """Roles an account can hold."""

    USER = "User"
    MANAGER = "Manager"
    ADMIN = "Admin"


class User(Base):
    """
    Account record: identity, credentials and role.

    email is stored lowercased; the unique index makes it the login key.
    password_hash is a bcrypt hash and is only changed through change-password.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default=Role.USER.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
