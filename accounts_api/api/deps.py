"""Shared route dependencies: bearer authentication."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accounts_api.core.config import Settings, get_settings
from accounts_api.schemas.auth import AccessTokenClaims
from accounts_api.services.tokens import verify_access_token

security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccessTokenClaims:
    """
    Dependency: require a valid `Authorization: Bearer <access token>` header.

    The decoded claims are returned and also stored on request.state.user.
    Raises UnauthorizedError (401) if the header is missing or the token is
    malformed, expired, signed with another key or lacks identity claims.
    """
    token = credentials.credentials if credentials is not None else None
    claims = verify_access_token(token, settings)
    request.state.user = claims
    return claims


CurrentUser = Annotated[AccessTokenClaims, Depends(get_current_user)]
