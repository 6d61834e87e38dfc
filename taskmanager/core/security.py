"""Password hashing and verification (bcrypt) plus credential input limits."""

import base64
import hashlib

import bcrypt

from taskmanager.core.config import settings

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

# Min/max lengths for account fields (request validation and the CLI).
EMAIL_MIN_LEN = 3
EMAIL_MAX_LEN = 255
NAME_MIN_LEN = 1
NAME_MAX_LEN = 100
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128


def _password_bytes(plain_password: str) -> bytes:
    # SHA-256 then base64: 44 bytes with no NULs, so bcrypt sees every input byte.
    # surrogatepass keeps lone surrogates from raising.
    digest = hashlib.sha256(plain_password.encode("utf-8", "surrogatepass")).digest()
    return base64.b64encode(digest)


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Each call uses a fresh salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """
    Verify a plain password against a stored hash.

    A missing, corrupt or foreign-format hash does not match; this never raises.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError, UnicodeEncodeError):
        return False


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookups."""
    return email.strip().lower()
