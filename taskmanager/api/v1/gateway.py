"""Request gateway: bearer token authentication and role checks (get_identity, require_roles)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskmanager.core.tokens import TokenService, get_token_service
from taskmanager.models.user import Role
from taskmanager.schemas.auth import Identity

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> Identity:
    """Dependency: require a valid Bearer token and return the caller's identity. Raises 401 otherwise."""
    if credentials is None:
        raise _unauthenticated("Not authenticated")
    claims = tokens.verify(credentials.credentials)
    if claims is None:
        logger.info("Rejected request with invalid or expired token")
        raise _unauthenticated("Invalid or expired token")
    return Identity(
        user_id=claims.subject_id,
        email=claims.email,
        role=claims.role,
        name=claims.name,
    )


def require_roles(*roles: Role | str) -> Callable[[Identity], Identity]:
    """Dependency factory: authenticated caller must hold one of ``roles``. Raises 403 otherwise."""
    allowed = frozenset(str(r) for r in roles)

    def _require(identity: Annotated[Identity, Depends(get_identity)]) -> Identity:
        if identity.role not in allowed:
            logger.info(
                "Rejected user id=%s with role %s (requires %s)",
                identity.user_id,
                identity.role,
                ", ".join(sorted(allowed)),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return identity

    return _require


require_admin = require_roles(Role.ADMIN)
