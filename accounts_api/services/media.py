"""Media host integration: stage uploaded images locally and push them to Cloudinary."""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import time
from typing import TYPE_CHECKING, BinaryIO

import httpx

from accounts_api.core.errors import (
    BadRequestError,
    InternalError,
    ServiceUnavailableError,
)
from accounts_api.schemas.media import MediaUploadResult

if TYPE_CHECKING:
    from fastapi import UploadFile

    from accounts_api.core.config import Settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class MediaNotConfiguredError(ServiceUnavailableError):
    """Raised when an upload is attempted but Cloudinary credentials are missing."""


class MediaUploadError(InternalError):
    """Raised when the media host cannot be reached or rejects the upload."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)


def _sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary signature: SHA-1 of sorted key=value pairs joined by '&' plus the API secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def _copy_limited(src: BinaryIO, dst: BinaryIO, max_bytes: int) -> int:
    total = 0
    while True:
        chunk = src.read(CHUNK_SIZE)
        if not chunk:
            return total
        total += len(chunk)
        if total > max_bytes:
            raise BadRequestError(
                f"File size must not exceed {max_bytes // (1024 * 1024) or 1} MB."
            )
        dst.write(chunk)


def stage_upload(upload: UploadFile, settings: Settings) -> str:
    """
    Validate an uploaded image and write it to a temporary file under UPLOAD_TMP_DIR.
    Returns the local path; the caller hands it to upload_image, which removes it.
    """
    filename = (upload.filename or "").strip()
    ext = os.path.splitext(filename)[1].lower()
    if not filename or ext not in settings.ALLOWED_IMAGE_EXTENSIONS:
        raise BadRequestError(
            "Uploaded file must be an image ("
            + ", ".join(settings.ALLOWED_IMAGE_EXTENSIONS)
            + ")."
        )
    os.makedirs(settings.UPLOAD_TMP_DIR, exist_ok=True)
    fd, path = tempfile.mkstemp(suffix=ext, dir=settings.UPLOAD_TMP_DIR)
    try:
        with os.fdopen(fd, "wb") as out:
            size = _copy_limited(upload.file, out, settings.MAX_UPLOAD_FILE_BYTES)
        if size == 0:
            raise BadRequestError("Uploaded file is empty.")
    except Exception:
        _remove_quietly(path)
        raise
    return path


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove staged upload", extra={"path": path})


def upload_image(local_path: str, settings: Settings) -> MediaUploadResult:
    """
    Upload a staged file to Cloudinary and return its URL.

    The local file is always removed, whether the upload succeeds or fails.
    Raises MediaNotConfiguredError if credentials are missing and
    MediaUploadError on transport failure or an error response.
    """
    try:
        if not settings.media_configured():
            raise MediaNotConfiguredError(
                "Media host is not configured; set CLOUDINARY_CLOUD_NAME, "
                "CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET."
            )
        return _post_to_cloudinary(local_path, settings)
    finally:
        _remove_quietly(local_path)


def _post_to_cloudinary(local_path: str, settings: Settings) -> MediaUploadResult:
    cloud_name = (settings.CLOUDINARY_CLOUD_NAME or "").strip()
    api_key = (settings.CLOUDINARY_API_KEY or "").strip()
    api_secret = settings.CLOUDINARY_API_SECRET.get_secret_value()
    url = f"{settings.CLOUDINARY_UPLOAD_URL}/{cloud_name}/auto/upload"

    params = {"timestamp": str(int(time.time()))}
    data = {
        **params,
        "api_key": api_key,
        "signature": _sign_params(params, api_secret),
    }
    try:
        with open(local_path, "rb") as fh:
            with httpx.Client(timeout=settings.CLOUDINARY_REQUEST_TIMEOUT_SEC) as client:
                resp = client.post(
                    url,
                    data=data,
                    files={"file": (os.path.basename(local_path), fh)},
                )
    except httpx.TimeoutException as e:
        logger.error("Media upload timed out", extra={"reason": str(e)[:200]})
        raise MediaUploadError("Media host timed out", cause=e) from e
    except httpx.HTTPError as e:
        logger.error("Media upload failed", extra={"reason": str(e)[:200]})
        raise MediaUploadError("Media host unreachable", cause=e) from e

    if resp.status_code >= 400:
        try:
            detail = resp.json().get("error", {}).get("message") or resp.text[:500]
        except ValueError:
            detail = resp.text[:500] if resp.text else "Unknown error"
        logger.error(
            "Media upload rejected",
            extra={"status_code": resp.status_code, "reason": str(detail)[:200]},
        )
        raise MediaUploadError(f"Media host returned {resp.status_code}: {detail}")

    try:
        body = resp.json()
    except ValueError as e:
        raise MediaUploadError("Media host returned invalid JSON", cause=e) from e
    asset_url = body.get("secure_url") or body.get("url")
    if not asset_url:
        raise MediaUploadError("Media host response missing asset URL")
    return MediaUploadResult(url=asset_url, public_id=body.get("public_id") or "")


def delete_image(public_id: str, settings: Settings) -> bool:
    """
    Best-effort removal of an uploaded image from Cloudinary.

    Never raises; returns True when the host confirms the deletion and logs
    a warning otherwise.
    """
    if not public_id or not settings.media_configured():
        return False
    cloud_name = (settings.CLOUDINARY_CLOUD_NAME or "").strip()
    api_key = (settings.CLOUDINARY_API_KEY or "").strip()
    api_secret = settings.CLOUDINARY_API_SECRET.get_secret_value()
    url = f"{settings.CLOUDINARY_UPLOAD_URL}/{cloud_name}/image/destroy"

    params = {"public_id": public_id, "timestamp": str(int(time.time()))}
    data = {
        **params,
        "api_key": api_key,
        "signature": _sign_params(params, api_secret),
    }
    try:
        with httpx.Client(timeout=settings.CLOUDINARY_REQUEST_TIMEOUT_SEC) as client:
            resp = client.post(url, data=data)
    except httpx.HTTPError as e:
        logger.warning(
            "Media cleanup failed",
            extra={"public_id": public_id, "reason": str(e)[:200]},
        )
        return False
    if resp.status_code >= 400:
        logger.warning(
            "Media cleanup rejected",
            extra={"public_id": public_id, "status_code": resp.status_code},
        )
        return False
    return True
