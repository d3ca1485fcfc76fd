"""
Image Uploader Backend - Image Lifecycle Service
=================================================

What:  The four image operations: upload, list, delete, update.
How:   Each operation validates its input locally, then runs one sequential
       chain of awaited calls: the Media Host (upload/destroy) and one
       Record Store write. Upstream failures surface as UpstreamError
       subclasses carrying the operation's caller-facing message.
Who:   Called by the /api route handlers, one instance per request.

Orchestration:
    upload:  validate → media_host.upload → INSERT → commit
    list:    SELECT * ORDER BY id
    delete:  validate id → SELECT → media_host.destroy → DELETE → commit
    update:  validate id → SELECT → [destroy old → upload new] → UPDATE → commit

Partial failures (not transactional across the two dependencies):
    1. upload: binary stored, INSERT fails. The fresh binary is destroyed
       on a best-effort basis; if that also fails it stays orphaned.
    2. delete: binary destroyed, DELETE fails. The record survives and
       points at a binary that no longer exists.
    3. update with image: old binary destroyed, new one stored, UPDATE
       fails. The new binary is destroyed on a best-effort basis; the record
       keeps the old media_id, whose binary is gone.
    Concurrent updates of the same id are not serialised.
"""

import logging
import re
from typing import List, NoReturn, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from image_uploader.exceptions import (
    MediaHostError,
    NotFoundError,
    RecordStoreError,
    UpstreamError,
    ValidationError,
)
from image_uploader.models.image import ImageRecord
from image_uploader.services.media_base import MediaHost, UploadedMedia

logger = logging.getLogger(__name__)

IMAGE_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

MISSING_IMAGE_MESSAGE = "Image not found"
INVALID_ID_MESSAGE = "Invalid image ID format"
NOT_FOUND_MESSAGE = "Image not Found"
EMPTY_STORE_MESSAGE = "No images found"

UPLOAD_ERROR_MESSAGE = "Server error during image upload"
LIST_ERROR_MESSAGE = "Server error fetching images"
DELETE_ERROR_MESSAGE = "Server error during image deletion"
UPDATE_ERROR_MESSAGE = "Server error during image update"


def _reraise_for_operation(exc: UpstreamError, message: str) -> NoReturn:
    """Re-raise `exc` as the same upstream type with the operation's message."""
    raise type(exc)(message=message, context=exc.context) from exc


class ImageService:
    """
    Business logic for image records.

    Holds no per-request state; the Media Host client is injected and the
    database session is passed to each call.
    """

    def __init__(self, media_host: MediaHost):
        self.media_host = media_host

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload(
        self,
        db: AsyncSession,
        image: Optional[str],
        title: Optional[str] = None,
    ) -> ImageRecord:
        """
        Store a new image and its metadata.

        Raises:
            ValidationError: `image` is missing or empty (nothing is called)
            MediaHostError / RecordStoreError: upstream failure (→ 500)
        """
        if not image:
            raise ValidationError(message=MISSING_IMAGE_MESSAGE, field="image")

        try:
            media = await self.media_host.upload(image)

            record = ImageRecord(title=title, image_url=media.url, media_id=media.media_id)
            db.add(record)
            await self._commit(db, fresh_media=media)
        except UpstreamError as e:
            _reraise_for_operation(e, UPLOAD_ERROR_MESSAGE)

        logger.info("Image record created: %s (media_id=%s)", record.id, record.media_id)
        return record

    # ── List ──────────────────────────────────────────────────────────────

    async def list_all(self, db: AsyncSession) -> List[ImageRecord]:
        """
        Return every record in id order: creation order, to one-second
        resolution across worker processes.

        Raises:
            NotFoundError: the store holds no records (→ 404)
            RecordStoreError: query failed (→ 500)
        """
        try:
            result = await db.execute(select(ImageRecord).order_by(ImageRecord.id))
            records = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing images: %s", str(e), exc_info=True)
            raise RecordStoreError(
                message=LIST_ERROR_MESSAGE,
                context={"error_type": type(e).__name__},
            ) from e

        if not records:
            raise NotFoundError(message=EMPTY_STORE_MESSAGE)
        return records

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete(self, db: AsyncSession, image_id: str) -> None:
        """
        Remove the Media Host binary, then the record.

        Raises:
            ValidationError: malformed id (nothing is called)
            NotFoundError: no record with that id
            MediaHostError / RecordStoreError: upstream failure (→ 500)
        """
        logger.info("Attempting to delete image with id: %s", image_id)
        image_id = self._validate_image_id(image_id)

        try:
            record = await self._get_record(db, image_id)

            if record.media_id:
                logger.info("Deleting image from media host: %s", record.media_id)
                await self.media_host.destroy(record.media_id)

            await self._delete_record(db, record)
        except UpstreamError as e:
            _reraise_for_operation(e, DELETE_ERROR_MESSAGE)

        logger.info("Image %s deleted", image_id)

    # ── Update ────────────────────────────────────────────────────────────

    async def update(
        self,
        db: AsyncSession,
        image_id: str,
        image: Optional[str] = None,
        title: Optional[str] = None,
    ) -> ImageRecord:
        """
        Replace the title and, when `image` is given, the stored binary.

        The title is always overwritten, with None when omitted. Without an
        image the media fields are left untouched.

        Raises:
            ValidationError: malformed id (nothing is called)
            NotFoundError: no record with that id
            MediaHostError / RecordStoreError: upstream failure (→ 500)
        """
        logger.info("Attempting to update image with id: %s", image_id)
        image_id = self._validate_image_id(image_id)

        try:
            record = await self._get_record(db, image_id)

            fresh_media: Optional[UploadedMedia] = None
            if image:
                await self.media_host.destroy(record.media_id)
                fresh_media = await self.media_host.upload(image)

            record.title = title
            if fresh_media is not None:
                record.image_url = fresh_media.url
                record.media_id = fresh_media.media_id

            await self._commit(db, fresh_media=fresh_media)
        except UpstreamError as e:
            _reraise_for_operation(e, UPDATE_ERROR_MESSAGE)

        logger.info("Image %s updated (new media: %s)", image_id, bool(image))
        return record

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _validate_image_id(image_id: str) -> str:
        """Check the 24-hex format and return the id in stored (lowercase) form."""
        if not image_id or not IMAGE_ID_PATTERN.match(image_id):
            logger.info("Invalid image ID format: %r", image_id)
            raise ValidationError(message=INVALID_ID_MESSAGE, field="id")
        return image_id.lower()

    async def _get_record(self, db: AsyncSession, image_id: str) -> ImageRecord:
        try:
            record = await db.get(ImageRecord, image_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching image %s: %s", image_id, str(e))
            raise RecordStoreError(
                context={"image_id": image_id, "error_type": type(e).__name__},
            ) from e

        if record is None:
            logger.info("Image with id %s not found in database", image_id)
            raise NotFoundError(message=NOT_FOUND_MESSAGE, resource_id=image_id)
        return record

    async def _delete_record(self, db: AsyncSession, record: ImageRecord) -> None:
        # rollback() expires the instance; read nothing from it afterwards
        record_id = record.id
        try:
            await db.delete(record)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Database error deleting image %s after its media was destroyed: %s",
                record_id,
                str(e),
            )
            raise RecordStoreError(
                context={"image_id": record_id, "error_type": type(e).__name__},
            ) from e

    async def _commit(
        self,
        db: AsyncSession,
        fresh_media: Optional[UploadedMedia] = None,
    ) -> None:
        """
        Commit pending changes.

        On failure the session is rolled back and `fresh_media`, the binary
        uploaded for this request, is discarded so it is not left without
        a record.
        """
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error persisting image record: %s", str(e), exc_info=True)
            if fresh_media is not None:
                await self._discard_orphan(fresh_media)
            raise RecordStoreError(
                context={"error_type": type(e).__name__},
            ) from e

    async def _discard_orphan(self, media: UploadedMedia) -> None:
        """Best-effort removal of a binary whose record could not be written."""
        try:
            await self.media_host.destroy(media.media_id)
            logger.info("Discarded orphaned media %s", media.media_id)
        except MediaHostError as e:
            logger.warning(
                "Could not discard orphaned media %s: %s",
                media.media_id,
                e.context.get("error", e.message),
            )
