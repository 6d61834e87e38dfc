"""SQLAlchemy ORM models."""

from taskmanager.models.base import Base
from taskmanager.models.user import Role, User

__all__ = ["Base", "Role", "User"]
