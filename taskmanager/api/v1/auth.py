"""Auth endpoints: register, login, change password, profile, token validation, logout, admin user list."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from taskmanager.api.v1.gateway import get_identity, require_admin
from taskmanager.core.database import get_db
from taskmanager.core.tokens import TokenService, get_token_service
from taskmanager.repositories.users import SqlAlchemyAccountStore
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
from taskmanager.services.auth import AuthOutcome, AuthResult, AuthService

logger = logging.getLogger(__name__)
router = APIRouter()

# Single place where service outcomes become HTTP status codes.
# 401 and 403 for bad tokens and roles come from the gateway dependencies.
OUTCOME_STATUS: dict[AuthOutcome, int] = {
    AuthOutcome.OK: status.HTTP_200_OK,
    AuthOutcome.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    AuthOutcome.DUPLICATE_EMAIL: status.HTTP_400_BAD_REQUEST,
    AuthOutcome.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthOutcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthOutcome.INTERNAL_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    """Dependency: AuthService bound to this request's DB session."""
    return AuthService(SqlAlchemyAccountStore(db), tokens)


def _to_response(result: AuthResult, response: Response) -> AuthResponse:
    response.status_code = OUTCOME_STATUS[result.outcome]
    return AuthResponse(
        success=result.success,
        message=result.message,
        token=result.token,
        user=result.user,
        errors=result.errors or None,
    )


def _raise_unless_ok(result: AuthResult, identity: Identity) -> AuthResult:
    """For routes whose success body is not an AuthResponse: failures become HTTPException."""
    if result.success:
        return result
    status_code = OUTCOME_STATUS[result.outcome]
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s for user id=%s", result.message, identity.user_id)
    else:
        logger.info("%s for user id=%s", result.message, identity.user_id)
    raise HTTPException(status_code=status_code, detail=result.message)


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
def register(
    body: RegisterRequest,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """Create an account and return a token for it. 400 if the email is already registered."""
    result = auth.register(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
        role=body.role,
    )
    return _to_response(result, response)


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
def login(
    body: LoginRequest,
    response: Response,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT and the account.
    Include the token in the Authorization header as: Bearer <token>
    """
    result = auth.login(email=body.email, password=body.password)
    return _to_response(result, response)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    response: Response,
    identity: Annotated[Identity, Depends(get_identity)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Change the caller's password. The current token stays valid."""
    if auth.change_password(identity.user_id, body.current_password, body.new_password):
        return MessageResponse(success=True, message="Password changed successfully")
    response.status_code = status.HTTP_400_BAD_REQUEST
    return MessageResponse(success=False, message="Current password is incorrect")


@router.get("/profile", response_model=UserResponse)
def get_profile(
    identity: Annotated[Identity, Depends(get_identity)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UserResponse:
    """Return the caller's account. 404 if it was removed or deactivated after the token was issued."""
    result = _raise_unless_ok(auth.get_profile(identity.user_id), identity)
    return result.user


@router.get("/validate-token", response_model=TokenValidationResponse)
def validate_token(
    identity: Annotated[Identity, Depends(get_identity)],
) -> TokenValidationResponse:
    """Echo the verified claims. Invalid tokens are rejected by the gateway before this runs."""
    return TokenValidationResponse(
        user_id=identity.user_id,
        email=identity.email,
        role=identity.role,
    )


@router.post("/logout", response_model=MessageResponse)
def logout() -> MessageResponse:
    """Advisory only: tokens are stateless, so the client discards its copy."""
    return MessageResponse(success=True, message="Logged out successfully")


@router.get("/users", response_model=UsersListResponse)
def list_users(
    admin: Annotated[Identity, Depends(require_admin)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UsersListResponse:
    """List all accounts (Admin only)."""
    result = _raise_unless_ok(auth.list_users(), admin)
    return UsersListResponse(users=result.users)
