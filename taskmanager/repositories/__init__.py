"""Persistence adapters used by the services."""

from taskmanager.repositories.users import AccountStore, SqlAlchemyAccountStore

__all__ = ["AccountStore", "SqlAlchemyAccountStore"]
