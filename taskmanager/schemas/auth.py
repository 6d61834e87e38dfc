"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from taskmanager.core.security import (
    EMAIL_MAX_LEN,
    EMAIL_MIN_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from taskmanager.models.user import Role, User


class CamelModel(BaseModel):
    """Base for wire schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """New account details."""

    first_name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    last_name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr = Field(..., max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role | None = Field(default=None, description="Defaults to User")

    @field_validator("first_name", "last_name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class LoginRequest(CamelModel):
    """Credentials for login. Email format is not checked so every bad login gets the same 401."""

    email: str = Field(..., min_length=EMAIL_MIN_LEN, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class UserResponse(CamelModel):
    """Public view of an account (never includes the password hash)."""

    user_id: int
    first_name: str
    last_name: str
    email: str
    role: str
    created_at: datetime | None = None
    last_login_at: datetime | None = None

    @classmethod
    def from_account(cls, account: User) -> "UserResponse":
        return cls(
            user_id=account.id,
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            role=account.role,
            created_at=account.created_at,
            last_login_at=account.last_login_at,
        )


class AuthResponse(CamelModel):
    """Body returned by register and login."""

    success: bool
    message: str
    token: str | None = None
    user: UserResponse | None = None
    errors: list[str] | None = None


class MessageResponse(CamelModel):
    success: bool
    message: str


class TokenValidationResponse(CamelModel):
    """Claims echoed back by GET /auth/validate-token."""

    valid: bool = True
    user_id: int
    email: str
    role: str
    message: str = "Token is valid"


class Identity(CamelModel):
    """Verified caller identity attached to a request by the gateway."""

    user_id: int
    email: str
    role: str
    name: str = ""


class UsersListResponse(CamelModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserResponse]
