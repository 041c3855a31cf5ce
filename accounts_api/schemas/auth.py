"""Request/response schemas for auth endpoints and decoded token claims."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from accounts_api.core.security import PASSWORD_MAX_BYTES
from accounts_api.schemas.common import CamelModel
from accounts_api.schemas.user import UserOut


class LoginRequest(CamelModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Account email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_BYTES, description="Password")


class RefreshRequest(CamelModel):
    """Refresh token supplied in the JSON body when no cookie is present."""

    refresh_token: str | None = Field(default=None, description="Refresh token")


class ChangePasswordRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    old_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_BYTES)
    new_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_BYTES)


class TokenPair(CamelModel):
    """Access and refresh token issued together."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class LoginData(CamelModel):
    """Payload of a successful login."""

    user: UserOut
    access_token: str
    refresh_token: str


class AccessTokenClaims(BaseModel):
    """Identity claims carried by an access token; required fields are enforced on decode."""

    model_config = ConfigDict(extra="ignore")

    id: int
    email: str
    username: str
    fullname: str
    type: Literal["access"]
    exp: int
    iat: int
    jti: str


class RefreshTokenClaims(BaseModel):
    """Claims carried by a refresh token (user id only)."""

    model_config = ConfigDict(extra="ignore")

    id: int
    type: Literal["refresh"]
    exp: int
    iat: int
    jti: str
