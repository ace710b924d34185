"""
ImageKit asset store client used for blog cover images.
"""

import logging
import time
from dataclasses import dataclass

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)


class AssetStoreError(Exception):
    """Upload or delete rejected by the asset store."""


@dataclass
class UploadResult:
    url: str
    file_id: str


def _auth() -> tuple[str, str]:
    # ImageKit uses the private key as basic-auth username with an empty password
    return (settings.IMAGEKIT_PRIVATE_KEY, "")


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or response.text
    except ValueError:
        return response.text


def upload_image(content: bytes, file_name: str, folder: str | None = None) -> UploadResult:
    """Upload binary content into `folder` and return its public URL and file id."""
    folder = folder or settings.BLOG_COVER_FOLDER
    logger.info(f"[ImageKit] Uploading {file_name} ({len(content)} bytes) to {folder}")

    try:
        with httpx.Client(timeout=settings.IMAGEKIT_TIMEOUT) as client:
            response = client.post(
                settings.IMAGEKIT_UPLOAD_URL,
                auth=_auth(),
                data={
                    "fileName": f"{int(time.time() * 1000)}_{file_name}",
                    "folder": folder,
                    "useUniqueFileName": "true",
                },
                files={"file": (file_name, content)},
            )
    except httpx.HTTPError as e:
        logger.error(f"[ImageKit] Upload request failed: {e}")
        raise AssetStoreError(str(e)) from e

    if response.status_code not in (200, 201):
        message = _error_message(response)
        logger.error(f"[ImageKit] Upload error {response.status_code}: {message}")
        raise AssetStoreError(message)

    result = response.json()
    logger.info(f"[ImageKit] Upload success: {result.get('url')}")
    return UploadResult(url=result["url"], file_id=result["fileId"])


def delete_image(file_id: str) -> bool:
    """Release an uploaded asset. Failures are logged and reported as False."""
    try:
        with httpx.Client(timeout=settings.IMAGEKIT_TIMEOUT) as client:
            response = client.delete(f"{settings.IMAGEKIT_API_URL}/files/{file_id}", auth=_auth())
    except httpx.HTTPError as e:
        logger.error(f"[ImageKit] Delete request failed for {file_id}: {e}")
        return False

    if response.status_code not in (200, 204):
        logger.error(f"[ImageKit] Delete error {response.status_code} for {file_id}: {_error_message(response)}")
        return False

    logger.debug(f"[ImageKit] Deleted {file_id}")
    return True
