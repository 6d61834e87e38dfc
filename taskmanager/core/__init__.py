"""Core configuration, database, credential hashing and session tokens."""

from taskmanager.core.config import get_settings, settings
from taskmanager.core.database import get_db
from taskmanager.core.tokens import get_token_service

__all__ = ["get_settings", "settings", "get_db", "get_token_service"]
