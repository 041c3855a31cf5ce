"""User account routes: registration, login, token refresh, logout and profile updates."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from accounts_api.api.deps import CurrentUser
from accounts_api.core.config import Settings, get_settings
from accounts_api.core.database import get_db
from accounts_api.core.errors import BadRequestError
from accounts_api.schemas.auth import (
    ChangePasswordRequest,
    LoginData,
    LoginRequest,
    RefreshRequest,
    TokenPair,
)
from accounts_api.schemas.common import ApiResponse
from accounts_api.schemas.media import MediaUploadResult
from accounts_api.schemas.user import UpdateUserDetailsRequest, UserOut
from accounts_api.services import credentials, media, tokens

logger = logging.getLogger(__name__)
router = APIRouter()

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def _set_auth_cookies(response: Response, pair: TokenPair, settings: Settings) -> None:
    for key, value in ((ACCESS_COOKIE, pair.access_token), (REFRESH_COOKIE, pair.refresh_token)):
        response.set_cookie(
            key,
            value,
            max_age=settings.COOKIE_MAX_AGE_SECONDS,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )


def _clear_auth_cookies(response: Response, settings: Settings) -> None:
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            key,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )


def _upload_optional(
    upload: UploadFile | None, settings: Settings
) -> MediaUploadResult | None:
    """Stage and upload an optional image; returns None when absent."""
    if upload is None or not upload.filename:
        return None
    local_path = media.stage_upload(upload, settings)
    return media.upload_image(local_path, settings)


@router.post(
    "/register",
    response_model=ApiResponse[UserOut],
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    db: DbSession,
    settings: AppSettings,
    username: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    fullname: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse[UserOut]:
    """
    Register a new account from a multipart form.

    Fields: username (letters and digits), email, fullname, password (8+ chars, at most 72 bytes);
    optional `avatar` and `coverImage` image files are stored on the media host.
    """
    username, email, fullname, password = credentials.validate_registration(
        username, email, fullname, password
    )
    # Reject duplicates before spending an upload on them.
    credentials.check_identity_available(db, username, email)

    uploaded: list[MediaUploadResult] = []
    try:
        avatar_result = _upload_optional(avatar, settings)
        if avatar_result is not None:
            uploaded.append(avatar_result)
        cover_result = _upload_optional(cover_image, settings)
        if cover_result is not None:
            uploaded.append(cover_result)

        user = credentials.create_user(
            db,
            username,
            email,
            fullname,
            password,
            settings,
            avatar_url=avatar_result.url if avatar_result else "",
            cover_url=cover_result.url if cover_result else "",
        )
    except Exception:
        # Images already on the media host would otherwise be orphaned.
        for result in uploaded:
            media.delete_image(result.public_id, settings)
        raise
    return ApiResponse[UserOut](
        status_code=status.HTTP_201_CREATED,
        data=UserOut.model_validate(user),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[LoginData])
def login_user(
    body: LoginRequest,
    response: Response,
    db: DbSession,
    settings: AppSettings,
) -> ApiResponse[LoginData]:
    """
    Authenticate with email and password.

    Sets `accessToken` and `refreshToken` httpOnly cookies and also returns the
    tokens so clients can send `Authorization: Bearer <accessToken>`.
    """
    user = credentials.authenticate(db, body.email, body.password)
    pair = tokens.issue_pair(db, user, settings)
    _set_auth_cookies(response, pair, settings)
    logger.info("User logged in", extra={"user_id": user.id})
    return ApiResponse[LoginData](
        data=LoginData(
            user=UserOut.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        ),
        message="User logged in successfully",
    )


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
def refresh_access_token(
    request: Request,
    response: Response,
    db: DbSession,
    settings: AppSettings,
    body: RefreshRequest | None = None,
) -> ApiResponse[TokenPair]:
    """Exchange the current refresh token (cookie, else JSON body) for a new pair."""
    incoming = request.cookies.get(REFRESH_COOKIE) or (body.refresh_token if body else None)
    pair = tokens.refresh_session(db, incoming, settings)
    _set_auth_cookies(response, pair, settings)
    return ApiResponse[TokenPair](data=pair, message="Access token refreshed")


@router.get("/logout", response_model=ApiResponse[dict])
def logout_user(
    current_user: CurrentUser,
    response: Response,
    db: DbSession,
    settings: AppSettings,
) -> ApiResponse[dict]:
    """Clear the stored refresh token and both auth cookies."""
    tokens.revoke_refresh_token(db, current_user.id)
    _clear_auth_cookies(response, settings)
    logger.info("User logged out", extra={"user_id": current_user.id})
    return ApiResponse[dict](data={}, message="User logged out")


@router.post("/change-password", response_model=ApiResponse[dict])
def change_current_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
) -> ApiResponse[dict]:
    credentials.change_password(
        db, current_user.id, body.old_password, body.new_password, settings
    )
    return ApiResponse[dict](data={}, message="Password changed successfully")


@router.post("/update-user-details", response_model=ApiResponse[UserOut])
def update_user_details(
    body: UpdateUserDetailsRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[UserOut]:
    """Update fullname and/or email. Other fields are rejected."""
    if body.fullname is None and body.email is None:
        raise BadRequestError("Fullname or email is required")
    user = credentials.update_fields(
        db, current_user.id, body.model_dump(exclude_none=True)
    )
    return ApiResponse[UserOut](
        data=UserOut.model_validate(user), message="User details updated"
    )


def _replace_image(
    upload: UploadFile | None,
    field: str,
    label: str,
    user_id: int,
    db: Session,
    settings: Settings,
) -> UserOut:
    if upload is None or not upload.filename:
        raise BadRequestError(f"{label} file is missing")
    local_path = media.stage_upload(upload, settings)
    result = media.upload_image(local_path, settings)
    user = credentials.update_fields(db, user_id, {field: result.url})
    return UserOut.model_validate(user)


@router.post("/update-avatar", response_model=ApiResponse[UserOut])
def update_user_avatar(
    current_user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse[UserOut]:
    user = _replace_image(avatar, "avatar", "Avatar", current_user.id, db, settings)
    return ApiResponse[UserOut](data=user, message="User avatar updated")


@router.post("/update-coverimage", response_model=ApiResponse[UserOut])
def update_cover_image(
    current_user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse[UserOut]:
    user = _replace_image(
        cover_image, "cover_image", "Cover image", current_user.id, db, settings
    )
    return ApiResponse[UserOut](data=user, message="Cover image updated")


@router.get("/get-user-details", response_model=ApiResponse[UserOut])
def get_user_details(
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[UserOut]:
    user = credentials.get_user(db, current_user.id)
    return ApiResponse[UserOut](
        data=UserOut.model_validate(user), message="User details found"
    )
