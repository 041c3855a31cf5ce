"""Pydantic request/response schemas."""

from accounts_api.schemas.auth import (
    AccessTokenClaims,
    ChangePasswordRequest,
    LoginData,
    LoginRequest,
    RefreshRequest,
    RefreshTokenClaims,
    TokenPair,
)
from accounts_api.schemas.common import ApiResponse, CamelModel, ErrorResponse
from accounts_api.schemas.health import HealthResponse
from accounts_api.schemas.media import MediaUploadResult
from accounts_api.schemas.user import UpdateUserDetailsRequest, UserOut

__all__ = [
    "AccessTokenClaims",
    "ApiResponse",
    "CamelModel",
    "ChangePasswordRequest",
    "ErrorResponse",
    "HealthResponse",
    "LoginData",
    "LoginRequest",
    "MediaUploadResult",
    "RefreshRequest",
    "RefreshTokenClaims",
    "TokenPair",
    "UpdateUserDetailsRequest",
    "UserOut",
]
