"""Credential store: create, authenticate and update user accounts."""

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from accounts_api.core.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)
from accounts_api.core.security import (
    FULLNAME_MAX_LEN,
    PASSWORD_MAX_BYTES,
    PASSWORD_MIN_LEN,
    hash_password,
    is_valid_email,
    is_valid_username,
    password_fits_bcrypt,
    verify_password,
)
from accounts_api.models.user import User

if TYPE_CHECKING:
    from accounts_api.core.config import Settings

logger = logging.getLogger(__name__)

# Profile fields that update_fields may touch; password and refresh token have their own paths.
MUTABLE_PROFILE_FIELDS = frozenset({"fullname", "email", "avatar", "cover_image"})


def normalize_username(username: str | None) -> str:
    return (username or "").strip().lower()


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise BadRequestError(
            f"Password must be at least {PASSWORD_MIN_LEN} characters long"
        )
    if not password_fits_bcrypt(password):
        raise BadRequestError(
            f"Password must be at most {PASSWORD_MAX_BYTES} bytes long"
        )


def _validate_email(email: str) -> None:
    if not is_valid_email(email):
        raise BadRequestError("Invalid email address")


def _validate_fullname(fullname: str) -> None:
    if not fullname or len(fullname) > FULLNAME_MAX_LEN:
        raise BadRequestError("Invalid full name")


def validate_registration(
    username: str | None,
    email: str | None,
    fullname: str | None,
    password: str | None,
) -> tuple[str, str, str, str]:
    """
    Check registration input and return normalized (username, email, fullname, password).
    Raises BadRequestError on missing fields, bad formats, or a short password.
    """
    username = normalize_username(username)
    email = normalize_email(email)
    fullname = (fullname or "").strip()
    password = password or ""
    if not username or not email or not fullname or not password:
        raise BadRequestError("All fields are required")
    if not is_valid_username(username):
        raise BadRequestError("Username must contain only letters and numbers")
    _validate_email(email)
    _validate_fullname(fullname)
    _validate_password(password)
    return username, email, fullname, password


def check_identity_available(db: Session, username: str, email: str) -> None:
    """Raise ConflictError if the username or email already belongs to an account."""
    existing = (
        db.query(User)
        .filter(or_(User.username == username, User.email == email))
        .first()
    )
    if existing is None:
        return
    if existing.username == username:
        raise ConflictError("Username is already taken")
    raise ConflictError("Email is already registered")


def create_user(
    db: Session,
    username: str | None,
    email: str | None,
    fullname: str | None,
    password: str | None,
    settings: "Settings",
    avatar_url: str = "",
    cover_url: str = "",
) -> User:
    """
    Validate and persist a new account with a bcrypt-hashed password.

    Raises BadRequestError for invalid input and ConflictError when the username
    or email is taken (checked up front and again by the unique constraints).
    """
    username, email, fullname, password = validate_registration(
        username, email, fullname, password
    )
    check_identity_available(db, username, email)

    user = User(
        username=username,
        email=email,
        fullname=fullname,
        password_hash=hash_password(password, settings.BCRYPT_ROUNDS),
        avatar=avatar_url or "",
        cover_image=cover_url or "",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Username or email is already registered") from e
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user


def get_user(db: Session, user_id: int) -> User:
    """Load a user by id or raise NotFoundError."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def authenticate(db: Session, email: str | None, password: str | None) -> User:
    """
    Return the user whose email and password match.
    Raises BadRequestError if email is missing, NotFoundError for an unknown
    email and UnauthorizedError for a wrong password.
    """
    email = normalize_email(email)
    if not email:
        raise BadRequestError("Email is required")
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        logger.warning("Login rejected", extra={"reason": "unknown_email"})
        raise NotFoundError("User not found")
    if not verify_password(password or "", user.password_hash):
        logger.warning(
            "Login rejected", extra={"user_id": user.id, "reason": "wrong_password"}
        )
        raise UnauthorizedError("Invalid email or password")
    return user


def update_fields(db: Session, user_id: int, fields: dict[str, Any]) -> User:
    """
    Update mutable profile fields (fullname, email, avatar, cover_image).

    Keys outside that set are rejected so password and refresh token can never
    be changed through this path. None values are ignored.
    """
    unknown = set(fields) - MUTABLE_PROFILE_FIELDS
    if unknown:
        raise BadRequestError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    values = {k: v for k, v in fields.items() if v is not None}
    if not values:
        raise BadRequestError("No fields to update")

    if "fullname" in values:
        values["fullname"] = values["fullname"].strip()
        _validate_fullname(values["fullname"])
    if "email" in values:
        values["email"] = normalize_email(values["email"])
        _validate_email(values["email"])
        taken = (
            db.query(User)
            .filter(User.email == values["email"], User.id != user_id)
            .first()
        )
        if taken is not None:
            raise ConflictError("Email is already registered")

    user = get_user(db, user_id)
    for key, value in values.items():
        setattr(user, key, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Email is already registered") from e
    db.refresh(user)
    return user


def change_password(
    db: Session,
    user_id: int,
    old_password: str,
    new_password: str,
    settings: "Settings",
) -> None:
    """Replace the password after checking the current one; the new one is re-hashed."""
    user = get_user(db, user_id)
    if not verify_password(old_password, user.password_hash):
        raise UnauthorizedError("Password incorrect")
    _validate_password(new_password)
    user.password_hash = hash_password(new_password, settings.BCRYPT_ROUNDS)
    db.commit()
    logger.info("Password changed", extra={"user_id": user.id})
