"""Access/refresh token issuance, verification and refresh-token rotation."""

import hmac
import logging
from typing import TYPE_CHECKING

import jwt
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from accounts_api.core.errors import InternalError, NotFoundError, UnauthorizedError
from accounts_api.core.security import decode_token, encode_token
from accounts_api.models.user import User
from accounts_api.schemas.auth import AccessTokenClaims, RefreshTokenClaims, TokenPair

if TYPE_CHECKING:
    from accounts_api.core.config import Settings

logger = logging.getLogger(__name__)


def issue_access_token(user: User, settings: "Settings") -> str:
    """Sign a short-lived token carrying the user's identity claims."""
    return encode_token(
        {
            "id": user.id,
            "email": user.email,
            "username": user.username,
            "fullname": user.fullname,
            "type": "access",
        },
        settings.ACCESS_TOKEN_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def issue_refresh_token(user: User, settings: "Settings") -> str:
    """Sign a long-lived token carrying only the user id."""
    return encode_token(
        {"id": user.id, "type": "refresh"},
        settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
        settings.REFRESH_TOKEN_EXPIRE_MINUTES,
    )


def issue_pair(db: Session, user: User, settings: "Settings") -> TokenPair:
    """
    Issue an access/refresh pair and store the refresh token on the user,
    replacing any previous one. Raises InternalError if it cannot be stored.
    """
    access_token = issue_access_token(user, settings)
    refresh_token = issue_refresh_token(user, settings)
    try:
        updated = (
            db.query(User)
            .filter(User.id == user.id)
            .update({User.refresh_token: refresh_token}, synchronize_session="fetch")
        )
        if updated != 1:
            raise InternalError("Error while generating tokens")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Storing refresh token failed", extra={"user_id": user.id})
        raise InternalError("Error while generating tokens") from e
    except InternalError:
        db.rollback()
        raise
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def verify_access_token(token: str | None, settings: "Settings") -> AccessTokenClaims:
    """Decode an access token; raise UnauthorizedError unless it is valid and complete."""
    if not token:
        raise UnauthorizedError("Unauthorized: no token provided")
    try:
        payload = decode_token(
            token,
            settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            settings.JWT_ALGORITHM,
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Access token has expired") from e
    except jwt.PyJWTError as e:
        raise UnauthorizedError("Invalid access token") from e
    try:
        return AccessTokenClaims.model_validate(payload)
    except ValidationError as e:
        raise UnauthorizedError("Invalid token payload") from e


def verify_refresh_token(token: str | None, settings: "Settings") -> RefreshTokenClaims:
    """Decode a refresh token with the refresh secret; raise UnauthorizedError if invalid."""
    if not token:
        raise UnauthorizedError("Unauthorized request")
    try:
        payload = decode_token(
            token,
            settings.REFRESH_TOKEN_SECRET.get_secret_value(),
            settings.JWT_ALGORITHM,
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Refresh token has expired") from e
    except jwt.PyJWTError as e:
        raise UnauthorizedError("Invalid refresh token") from e
    try:
        return RefreshTokenClaims.model_validate(payload)
    except ValidationError as e:
        raise UnauthorizedError("Invalid token payload") from e


def refresh_session(db: Session, incoming: str | None, settings: "Settings") -> TokenPair:
    """
    Exchange a refresh token for a new pair.

    The token must verify with the refresh secret, belong to an existing user
    and equal the token currently stored for that user; any superseded or
    revoked token is rejected. On success the stored token is rotated.
    """
    try:
        claims = verify_refresh_token(incoming, settings)
    except UnauthorizedError as e:
        logger.warning("Refresh rejected", extra={"reason": e.message})
        raise
    user = db.get(User, claims.id)
    if user is None:
        logger.warning(
            "Refresh rejected", extra={"user_id": claims.id, "reason": "unknown_user"}
        )
        raise NotFoundError("User not found")
    stored = user.refresh_token or ""
    if not stored or not hmac.compare_digest(stored.encode(), incoming.encode()):
        logger.warning(
            "Refresh rejected", extra={"user_id": user.id, "reason": "token_mismatch"}
        )
        raise UnauthorizedError("Refresh token is expired or used")
    return issue_pair(db, user, settings)


def revoke_refresh_token(db: Session, user_id: int) -> None:
    """Clear the stored refresh token so no refresh is possible until the next login."""
    db.query(User).filter(User.id == user_id).update(
        {User.refresh_token: None}, synchronize_session="fetch"
    )
    db.commit()
