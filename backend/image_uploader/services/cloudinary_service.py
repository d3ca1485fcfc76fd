"""
Image Uploader Backend - Cloudinary Media Host
===============================================

What:  MediaHost implementation backed by the Cloudinary Python SDK.
How:   Credentials, folder and resource type are held by the instance and
       passed with every SDK call, so no process-wide `cloudinary.config()`
       is ever mutated. The SDK is blocking; each call runs in a worker
       thread via asyncio.to_thread.
Who:   Built once per app in main.create_app(); handed to ImageService.

Failure model:
    Any exception from the SDK (API errors, network errors, malformed
    responses) is logged with its detail and re-raised as MediaHostError.
    There is no retry and no circuit breaking.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Dict

import cloudinary.api
import cloudinary.uploader

from image_uploader.config import Settings
from image_uploader.exceptions import MediaHostError
from image_uploader.services.media_base import MediaHost, UploadedMedia

logger = logging.getLogger(__name__)


class CloudinaryMediaHost(MediaHost):
    """Cloudinary-backed media host."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "uploads",
        resource_type: str = "auto",
    ):
        self.folder = folder
        self.resource_type = resource_type
        self._credentials: Dict[str, str] = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

        logger.info(
            "CloudinaryMediaHost initialized (cloud=%s, folder=%s, resource_type=%s)",
            cloud_name or "<unset>",
            folder,
            resource_type,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryMediaHost":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.upload_folder,
            resource_type=settings.upload_resource_type,
        )

    async def upload(self, data: str) -> UploadedMedia:
        """
        Upload `data` into the configured folder.

        Flow:
            1. uploader.upload(data, folder=..., resource_type=..., **credentials)
            2. Read secure_url and public_id from the response
            3. Wrap any failure in MediaHostError
        """
        call_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        try:
            result: Dict[str, Any] = await asyncio.to_thread(
                cloudinary.uploader.upload,
                data,
                folder=self.folder,
                resource_type=self.resource_type,
                **self._credentials,
            )
            media = UploadedMedia(url=result["secure_url"], media_id=result["public_id"])
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] Cloudinary upload failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise MediaHostError(
                message="Media host upload failed",
                context={"call_id": call_id, "error_type": type(e).__name__, "error": str(e)},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "[%s] Cloudinary upload completed in %.0fms: public_id=%s",
            call_id,
            duration_ms,
            media.media_id,
        )
        logger.debug("[%s] Cloudinary upload response: %s", call_id, result)
        return media

    async def destroy(self, media_id: str) -> None:
        """
        Delete `media_id` from Cloudinary.

        A response other than {"result": "ok"} (typically "not found") is
        logged as a warning; the caller proceeds as if the binary is gone.
        """
        try:
            result: Dict[str, Any] = await asyncio.to_thread(
                cloudinary.uploader.destroy,
                media_id,
                **self._credentials,
            )
        except Exception as e:
            logger.error("Cloudinary destroy failed for %s: %s", media_id, str(e))
            raise MediaHostError(
                message="Media host delete failed",
                context={"media_id": media_id, "error_type": type(e).__name__, "error": str(e)},
            ) from e

        outcome = result.get("result") if isinstance(result, dict) else None
        if outcome != "ok":
            logger.warning("Cloudinary destroy of %s returned %r", media_id, outcome)
        else:
            logger.info("Cloudinary object destroyed: %s", media_id)

    async def health_check(self) -> bool:
        """Ping the Admin API with the configured credentials."""
        try:
            response = await asyncio.to_thread(cloudinary.api.ping, **self._credentials)
            return response.get("status") == "ok"
        except Exception as e:
            logger.warning("Cloudinary health check failed: %s", str(e))
            return False
