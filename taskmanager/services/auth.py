"""Account registration, login, password change and lookups."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from functools import cache

from taskmanager.core.security import hash_password, normalize_email, verify_password
from taskmanager.core.tokens import Clock, TokenService, utc_now
from taskmanager.models.user import Role, User
from taskmanager.repositories.users import AccountStore
from taskmanager.schemas.auth import UserResponse

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
REGISTRATION_FAILED_MESSAGE = "Registration failed"
LOGIN_FAILED_MESSAGE = "Login failed"
ACCOUNT_NOT_FOUND_MESSAGE = "User not found"
PROFILE_FAILED_MESSAGE = "An error occurred while retrieving profile"
LISTING_FAILED_MESSAGE = "An error occurred while listing users"


class AccountLookupError(Exception):
    """Raised when the account store fails during a lookup; carries only a generic message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthOutcome(enum.StrEnum):
    """Tag of an AuthResult; the HTTP layer maps each to one status code."""

    OK = "ok"
    VALIDATION_FAILED = "validation_failed"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_FOUND = "not_found"
    INTERNAL_FAILURE = "internal_failure"


@dataclass(frozen=True)
class AuthResult:
    outcome: AuthOutcome
    message: str
    token: str | None = None
    user: UserResponse | None = None
    users: list[UserResponse] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome is AuthOutcome.OK

    @classmethod
    def failure(
        cls, outcome: AuthOutcome, message: str, errors: list[str] | None = None
    ) -> AuthResult:
        return cls(outcome=outcome, message=message, errors=errors or [])


@cache
def _dummy_hash() -> str:
    # Compared against when no account matches, so unknown emails cost the same as wrong passwords.
    return hash_password("not-a-real-password")


class AuthService:
    """
    Orchestrates the account lifecycle over an AccountStore.

    Holds no per-request state. Store failures are logged and turned into an
    INTERNAL_FAILURE result (or False / None) instead of propagating.
    """

    def __init__(
        self,
        store: AccountStore,
        tokens: TokenService,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._clock = clock

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: Role | str | None = None,
    ) -> AuthResult:
        """Create an active account and return a token for it."""
        normalized = normalize_email(email)
        first_name, last_name = first_name.strip(), last_name.strip()
        blank = [
            f"{label} must not be blank"
            for label, value in (("firstName", first_name), ("lastName", last_name))
            if not value
        ]
        if blank:
            return AuthResult.failure(AuthOutcome.VALIDATION_FAILED, "Invalid input data", blank)
        try:
            account_role = Role(role) if role else Role.USER
        except ValueError:
            return AuthResult.failure(
                AuthOutcome.VALIDATION_FAILED,
                "Invalid input data",
                [f"role must be one of: {', '.join(r.value for r in Role)}"],
            )

        try:
            if self._store.find_by_email(normalized) is not None:
                logger.warning("Registration rejected, email already registered: %s", normalized)
                return AuthResult.failure(AuthOutcome.DUPLICATE_EMAIL, DUPLICATE_EMAIL_MESSAGE)

            account = User(
                first_name=first_name,
                last_name=last_name,
                email=normalized,
                password_hash=hash_password(password),
                role=account_role.value,
                is_active=True,
                created_at=self._clock(),
            )
            account = self._store.insert(account)
            token = self._tokens.issue(account)
        except Exception:
            logger.exception("Registration failed for %s", normalized)
            return AuthResult.failure(AuthOutcome.INTERNAL_FAILURE, REGISTRATION_FAILED_MESSAGE)

        logger.info("Account registered: id=%s email=%s role=%s", account.id, normalized, account.role)
        return AuthResult(
            outcome=AuthOutcome.OK,
            message="Registration successful",
            token=token,
            user=UserResponse.from_account(account),
        )

    def login(self, email: str, password: str) -> AuthResult:
        """
        Check credentials and return a token.

        Unknown email, inactive account and wrong password all produce the same
        INVALID_CREDENTIALS result.
        """
        normalized = normalize_email(email)
        try:
            account = self._store.find_by_email(normalized)
            stored_hash = account.password_hash if account is not None else _dummy_hash()
            password_ok = verify_password(password, stored_hash)
            if account is None or not account.is_active or not password_ok:
                logger.warning("Login failed for %s", normalized)
                return AuthResult.failure(
                    AuthOutcome.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE
                )

            account.last_login_at = self._clock()
            self._store.update(account)
            token = self._tokens.issue(account)
        except Exception:
            logger.exception("Login failed for %s", normalized)
            return AuthResult.failure(AuthOutcome.INTERNAL_FAILURE, LOGIN_FAILED_MESSAGE)

        logger.info("Login succeeded: id=%s email=%s", account.id, normalized)
        return AuthResult(
            outcome=AuthOutcome.OK,
            message="Login successful",
            token=token,
            user=UserResponse.from_account(account),
        )

    def change_password(self, account_id: int, current_password: str, new_password: str) -> bool:
        """
        Replace the password after checking the current one.

        Tokens issued before the change stay valid until they expire.
        """
        try:
            account = self._store.find_by_id(account_id)
            if account is None or not account.is_active:
                logger.warning("Password change rejected, no active account: id=%s", account_id)
                return False
            if not verify_password(current_password, account.password_hash):
                logger.warning("Password change rejected, wrong current password: id=%s", account_id)
                return False

            account.password_hash = hash_password(new_password)
            self._store.update(account)
        except Exception:
            logger.exception("Password change failed for id=%s", account_id)
            return False

        logger.info("Password changed: id=%s", account_id)
        return True

    def get_account_by_id(self, account_id: int) -> User | None:
        """Active account with this id, or None. Raises AccountLookupError if the store fails."""
        try:
            account = self._store.find_by_id(account_id)
        except Exception as e:
            logger.exception("Account lookup failed for id=%s", account_id)
            raise AccountLookupError("Account lookup failed") from e
        if account is None or not account.is_active:
            return None
        return account

    def get_account_by_email(self, email: str) -> User | None:
        """Active account with this email (case-insensitive), or None."""
        normalized = normalize_email(email)
        try:
            account = self._store.find_by_email(normalized)
        except Exception as e:
            logger.exception("Account lookup failed for %s", normalized)
            raise AccountLookupError("Account lookup failed") from e
        if account is None or not account.is_active:
            return None
        return account

    def list_accounts(self) -> list[User]:
        try:
            return self._store.list_all()
        except Exception as e:
            logger.exception("Account listing failed")
            raise AccountLookupError("Account listing failed") from e

    def get_profile(self, account_id: int) -> AuthResult:
        """Public view of the caller's account; NOT_FOUND once it is gone or deactivated."""
        try:
            account = self.get_account_by_id(account_id)
        except AccountLookupError:
            return AuthResult.failure(AuthOutcome.INTERNAL_FAILURE, PROFILE_FAILED_MESSAGE)
        if account is None:
            return AuthResult.failure(AuthOutcome.NOT_FOUND, ACCOUNT_NOT_FOUND_MESSAGE)
        return AuthResult(
            outcome=AuthOutcome.OK,
            message="Profile retrieved",
            user=UserResponse.from_account(account),
        )

    def list_users(self) -> AuthResult:
        try:
            accounts = self.list_accounts()
        except AccountLookupError:
            return AuthResult.failure(AuthOutcome.INTERNAL_FAILURE, LISTING_FAILED_MESSAGE)
        return AuthResult(
            outcome=AuthOutcome.OK,
            message="Users retrieved",
            users=[UserResponse.from_account(a) for a in accounts],
        )
