"""Issue and verify signed, expiring session tokens (JWT, HMAC)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import jwt

from taskmanager.core.config import get_settings

if TYPE_CHECKING:
    from taskmanager.core.config import Settings
    from taskmanager.models.user import User

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("sub", "email", "role", "iat", "exp", "iss", "aud")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class TokenConfig:
    """Signing secret and token policy; built once at startup and only read afterwards."""

    secret: str
    algorithm: str
    issuer: str
    audience: str
    ttl: timedelta

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenConfig:
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
        )


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims carried by a verified token."""

    subject_id: int
    name: str
    first_name: str
    last_name: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime
    issuer: str
    audience: str


class TokenService:
    """
    Mints and validates session tokens.

    A token is valid from issue until ``exp`` (no clock-skew leeway) and is never
    revoked server-side. Verification failures of any kind return None so callers
    cannot tell a forged token from an expired one.
    """

    def __init__(self, config: TokenConfig, clock: Clock = utc_now) -> None:
        self._config = config
        self._clock = clock

    @property
    def config(self) -> TokenConfig:
        return self._config

    def issue(self, account: User) -> str:
        """Create a signed token for the account, valid for the configured TTL."""
        now = self._clock()
        first_name = account.first_name or ""
        last_name = account.last_name or ""
        payload: dict[str, Any] = {
            "sub": str(account.id),
            "name": f"{first_name} {last_name}".strip(),
            "given_name": first_name,
            "family_name": last_name,
            "email": account.email,
            "role": account.role,
            "iat": now,
            "exp": now + self._config.ttl,
            "iss": self._config.issuer,
            "aud": self._config.audience,
        }
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def verify(self, token: str) -> TokenClaims | None:
        """Return the token's claims, or None if it is invalid for any reason."""
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                issuer=self._config.issuer,
                # Expiry is checked below against the injected clock.
                options={"verify_exp": False, "require": list(REQUIRED_CLAIMS)},
            )
        except jwt.PyJWTError as e:
            logger.debug("Token rejected: %s", type(e).__name__)
            return None

        try:
            subject_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (TypeError, ValueError, OverflowError, OSError):
            logger.debug("Token rejected: malformed claims")
            return None

        if self._clock() >= expires_at:
            logger.debug("Token rejected: expired")
            return None

        return TokenClaims(
            subject_id=subject_id,
            name=str(payload.get("name", "")),
            first_name=str(payload.get("given_name", "")),
            last_name=str(payload.get("family_name", "")),
            email=str(payload["email"]),
            role=str(payload["role"]),
            issued_at=issued_at,
            expires_at=expires_at,
            issuer=self._config.issuer,
            audience=self._config.audience,
        )


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token service built from settings (safe to call from dependencies)."""
    return TokenService(TokenConfig.from_settings(get_settings()))
