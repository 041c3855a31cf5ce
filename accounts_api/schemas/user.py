"""Schemas for user records as exposed over the API."""

from datetime import datetime

from pydantic import ConfigDict, Field

from accounts_api.schemas.common import CamelModel


class UserOut(CamelModel):
    """Public view of a user. Never carries the password hash or refresh token."""

    id: int
    username: str
    email: str
    fullname: str
    avatar: str = ""
    cover_image: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UpdateUserDetailsRequest(CamelModel):
    """Mutable profile fields; any other key is rejected."""

    model_config = ConfigDict(extra="forbid")

    fullname: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
