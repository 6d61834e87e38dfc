"""Pydantic request/response schemas."""

from taskmanager.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    Identity,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenValidationResponse,
    UserResponse,
    UsersListResponse,
)
from taskmanager.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "ChangePasswordRequest",
    "HealthResponse",
    "Identity",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "TokenValidationResponse",
    "UserResponse",
    "UsersListResponse",
]
