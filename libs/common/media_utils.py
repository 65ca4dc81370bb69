"""Image storage helpers backed by Cloudinary.

Uploads raise on failure so the caller can reject the request; deletions are
best-effort and only log, since a stale image must never block a write.
"""

import asyncio
from functools import lru_cache
from typing import Any, Optional

import cloudinary
import cloudinary.uploader
from fastapi import HTTPException, UploadFile, status

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


class MediaUploadError(Exception):
    """Raised when the media store rejects an upload."""


@lru_cache
def _configure() -> bool:
    settings = get_settings()
    if not (
        settings.CLOUDINARY_CLOUD_NAME
        and settings.CLOUDINARY_API_KEY
        and settings.CLOUDINARY_API_SECRET
    ):
        return False
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )
    return True


def _folder(folder: str) -> str:
    base = get_settings().CLOUDINARY_ASSET_FOLDER
    return f"{base}/{folder}" if base else folder


def extract_public_id(url: Optional[str]) -> Optional[str]:
    """Return the Cloudinary public id (folder path, no extension) of a URL."""
    if not url or "cloudinary.com" not in url or "/upload/" not in url:
        return None

    path = url.split("/upload/", 1)[1]
    segments = path.split("/")
    # Drop the version segment ("v1712345678") when present.
    if segments and segments[0].startswith("v") and segments[0][1:].isdigit():
        segments = segments[1:]
    if not segments:
        return None
    return "/".join(segments).rsplit(".", 1)[0]


async def upload_image(file: UploadFile, folder: str) -> str:
    """Upload an image and return its secure URL."""
    if not _configure():
        raise MediaUploadError("Image storage is not configured")

    data = await file.read()
    options: dict[str, Any] = {
        "folder": _folder(folder),
        "resource_type": "image",
        "overwrite": True,
    }

    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.upload, data, **options
        )
    except Exception as e:
        logger.error(f"Cloudinary upload failed: {e}")
        raise MediaUploadError(f"Failed to upload image: {e}") from e

    logger.info(f"Uploaded image {result.get('public_id')} to Cloudinary")
    return result["secure_url"]


async def delete_image(url: Optional[str]) -> bool:
    """Delete an image by URL. Never raises; returns whether it was removed."""
    public_id = extract_public_id(url)
    if not public_id:
        return False
    if not _configure():
        logger.warning("Cloudinary not configured - image not deleted")
        return False

    try:
        result = await asyncio.to_thread(cloudinary.uploader.destroy, public_id)
    except Exception as e:
        logger.warning(f"Failed to delete image {public_id}: {e}")
        return False

    return result.get("result") == "ok"


async def store_upload(file: Optional[UploadFile], folder: str) -> Optional[str]:
    """
    Validate and upload an optional multipart image for a router.

    Returns None when no file was sent; maps bad input to 400 and storage
    failures to 502.
    """
    if file is None or not file.filename:
        return None

    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only JPEG, PNG, WebP and GIF images are allowed",
        )
    if file.size is not None and file.size > MAX_IMAGE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Image must be 5MB or smaller",
        )

    try:
        return await upload_image(file, folder)
    except MediaUploadError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
