"""Password hashing and low-level JWT encode/decode helpers."""

import re
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

# Lengths and formats for account fields (input validation).
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 64
PASSWORD_MIN_LEN = 8
# bcrypt only reads the first 72 bytes; longer passwords are rejected, never truncated.
PASSWORD_MAX_BYTES = 72
EMAIL_MAX_LEN = 255
FULLNAME_MAX_LEN = 255

USERNAME_RE = re.compile(r"^[a-zA-Z0-9]+$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def password_fits_bcrypt(plain_password: str) -> bool:
    return len(plain_password.encode("utf-8")) <= PASSWORD_MAX_BYTES


def hash_password(plain_password: str, rounds: int) -> str:
    """Hash a plain-text password for storage. Raises ValueError above 72 UTF-8 bytes."""
    if not password_fits_bcrypt(plain_password):
        raise ValueError(f"Password exceeds {PASSWORD_MAX_BYTES} bytes")
    pw_bytes = plain_password.encode("utf-8")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    if not plain_password or not hashed or not password_fits_bcrypt(plain_password):
        return False
    pw_bytes = plain_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def is_valid_username(username: str) -> bool:
    return (
        USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN
        and USERNAME_RE.match(username) is not None
    )


def is_valid_email(email: str) -> bool:
    return len(email) <= EMAIL_MAX_LEN and EMAIL_RE.match(email) is not None


def encode_token(
    claims: dict[str, Any],
    secret: str,
    algorithm: str,
    expires_minutes: int,
) -> str:
    """Sign claims as a JWT with iat, exp and a unique jti."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        **claims,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str) -> dict[str, Any]:
    """
    Decode and validate a JWT; return the raw payload.
    Raises jwt.PyJWTError on invalid signature, malformed or expired token.
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        options={"require": ["exp", "iat"]},
    )
