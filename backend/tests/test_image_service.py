"""
Image Uploader Backend - ImageService Unit Tests
=================================================

What:  Tests for the image lifecycle (upload, list, delete, update).
How:   Real AsyncSession on in-memory SQLite; the Media Host is an AsyncMock.

What we test:
    ✅ Validation failures touch neither dependency
    ✅ Records carry exactly what the Media Host returned
    ✅ Empty store → NotFoundError
    ✅ Delete removes binary and record; update replaces binary when given
    ✅ The three partial-failure windows of the two-step writes
"""

import base64
from unittest.mock import AsyncMock, call, patch

import pytest
from sqlalchemy.exc import OperationalError

from image_uploader.exceptions import (
    MediaHostError,
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from image_uploader.models.image import ImageRecord
from image_uploader.services.image_service import ImageService

from conftest import CLOUDINARY_URL_PREFIX

MISSING_ID = "507f1f77bcf86cd799439011"


def _db_failure() -> OperationalError:
    return OperationalError("COMMIT", {}, Exception("database is locked"))


class TestUpload:
    """Tests for ImageService.upload."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image", [None, ""])
    async def test_missing_image_is_rejected_without_side_effects(
        self, media_host, mock_db_session, image
    ):
        service = ImageService(media_host)

        with pytest.raises(ValidationError, match="Image not found"):
            await service.upload(mock_db_session, image=image, title="cat")

        media_host.upload.assert_not_called()
        media_host.destroy.assert_not_called()
        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_record_matches_media_host_response(
        self, media_host, db_session, sample_image_data_uri
    ):
        service = ImageService(media_host)

        record = await service.upload(db_session, image=sample_image_data_uri, title="cat")

        media_host.upload.assert_awaited_once_with(sample_image_data_uri)
        assert record.title == "cat"
        assert record.image_url == f"{CLOUDINARY_URL_PREFIX}v1700000000/uploads/img1.jpg"
        assert record.media_id == "uploads/img1"
        assert len(record.id) == 24
        int(record.id, 16)

    @pytest.mark.asyncio
    async def test_uploaded_record_is_listed(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)

        record = await service.upload(db_session, image=sample_image_data_uri, title=None)
        records = await service.list_all(db_session)

        assert [r.id for r in records] == [record.id]
        assert records[0].title is None

    @pytest.mark.asyncio
    async def test_large_jpeg_payload(self, media_host, db_session, sample_image_bytes):
        """A ~24KB base64 JPEG goes to the host untouched."""
        payload = sample_image_bytes + b"\x00" * 18_000
        data_uri = "data:image/jpeg;base64," + base64.b64encode(payload).decode()
        assert len(data_uri) > 24_000
        service = ImageService(media_host)

        record = await service.upload(db_session, image=data_uri, title="cat")

        assert record.image_url.startswith(CLOUDINARY_URL_PREFIX)
        assert record.media_id
        media_host.upload.assert_awaited_once_with(data_uri)

    @pytest.mark.asyncio
    async def test_media_host_failure_stores_nothing(
        self, media_host, db_session, sample_image_data_uri
    ):
        media_host.upload.side_effect = MediaHostError(context={"error": "Invalid image file"})
        service = ImageService(media_host)

        with pytest.raises(MediaHostError) as exc_info:
            await service.upload(db_session, image=sample_image_data_uri)

        assert exc_info.value.message == "Server error during image upload"
        assert exc_info.value.context["error"] == "Invalid image file"
        with pytest.raises(NotFoundError):
            await service.list_all(db_session)

    @pytest.mark.asyncio
    async def test_persist_failure_discards_uploaded_binary(
        self, media_host, db_session, sample_image_data_uri
    ):
        """Binary stored, INSERT fails: the fresh binary is destroyed again."""
        service = ImageService(media_host)

        with patch.object(db_session, "commit", AsyncMock(side_effect=_db_failure())):
            with pytest.raises(RecordStoreError) as exc_info:
                await service.upload(db_session, image=sample_image_data_uri)

        assert exc_info.value.message == "Server error during image upload"
        media_host.destroy.assert_awaited_once_with("uploads/img1")
        with pytest.raises(NotFoundError):
            await service.list_all(db_session)

    @pytest.mark.asyncio
    async def test_persist_failure_with_failed_cleanup_leaves_orphan(
        self, media_host, db_session, sample_image_data_uri
    ):
        """If the compensating destroy fails too, the binary stays orphaned."""
        media_host.destroy.side_effect = MediaHostError()
        service = ImageService(media_host)

        with patch.object(db_session, "commit", AsyncMock(side_effect=_db_failure())):
            with pytest.raises(RecordStoreError):
                await service.upload(db_session, image=sample_image_data_uri)

        media_host.destroy.assert_awaited_once_with("uploads/img1")


class TestListAll:
    """Tests for ImageService.list_all."""

    @pytest.mark.asyncio
    async def test_empty_store_raises_not_found(self, media_host, db_session):
        service = ImageService(media_host)

        with pytest.raises(NotFoundError, match="No images found"):
            await service.list_all(db_session)

    @pytest.mark.asyncio
    async def test_returns_exactly_the_stored_records_in_creation_order(
        self, media_host, db_session, sample_image_data_uri
    ):
        service = ImageService(media_host)
        created = [
            await service.upload(db_session, image=sample_image_data_uri, title=title)
            for title in ("one", "two", "three")
        ]

        records = await service.list_all(db_session)

        assert [r.id for r in records] == [r.id for r in created]
        assert [r.title for r in records] == ["one", "two", "three"]

    @pytest.mark.asyncio
    async def test_database_failure_is_upstream_error(self, media_host, db_session):
        service = ImageService(media_host)

        with patch.object(db_session, "execute", AsyncMock(side_effect=_db_failure())):
            with pytest.raises(RecordStoreError, match="Server error fetching images"):
                await service.list_all(db_session)


class TestDelete:
    """Tests for ImageService.delete."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "image_id",
        ["zzz", "", "507f1f77bcf86cd79943901", "507f1f77bcf86cd7994390111", "507f1f77bcf86cd79943901g"],
    )
    async def test_malformed_id_touches_nothing(self, media_host, mock_db_session, image_id):
        service = ImageService(media_host)

        with pytest.raises(ValidationError, match="Invalid image ID format"):
            await service.delete(mock_db_session, image_id)

        media_host.destroy.assert_not_called()
        mock_db_session.get.assert_not_awaited()
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self, media_host, db_session):
        service = ImageService(media_host)

        with pytest.raises(NotFoundError, match="Image not Found"):
            await service.delete(db_session, MISSING_ID)

        media_host.destroy.assert_not_called()

    @pytest.mark.asyncio
    async def test_removes_binary_and_record(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)
        keep = await service.upload(db_session, image=sample_image_data_uri, title="keep")
        gone = await service.upload(db_session, image=sample_image_data_uri, title="gone")

        await service.delete(db_session, gone.id)

        media_host.destroy.assert_awaited_once_with(gone.media_id)
        records = await service.list_all(db_session)
        assert [r.id for r in records] == [keep.id]

    @pytest.mark.asyncio
    async def test_id_is_case_insensitive(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri)

        await service.delete(db_session, record.id.upper())

        with pytest.raises(NotFoundError):
            await service.list_all(db_session)

    @pytest.mark.asyncio
    async def test_media_host_failure_keeps_record(
        self, media_host, db_session, sample_image_data_uri
    ):
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri)
        media_host.destroy.side_effect = MediaHostError()

        with pytest.raises(MediaHostError, match="Server error during image deletion"):
            await service.delete(db_session, record.id)

        assert [r.id for r in await service.list_all(db_session)] == [record.id]

    @pytest.mark.asyncio
    async def test_record_delete_failure_leaves_dangling_record(
        self, media_host, db_session, sample_image_data_uri
    ):
        """
        Binary destroyed, DELETE fails: the record survives and points at a
        binary that no longer exists. Not compensated.
        """
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri)
        record_id, media_id = record.id, record.media_id

        with patch.object(db_session, "commit", AsyncMock(side_effect=_db_failure())):
            with pytest.raises(RecordStoreError, match="Server error during image deletion") as exc_info:
                await service.delete(db_session, record_id)

        assert exc_info.value.context["image_id"] == record_id
        media_host.destroy.assert_awaited_once_with(media_id)
        survivor = await db_session.get(ImageRecord, record_id)
        assert survivor is not None
        assert survivor.media_id == media_id


class TestUpdate:
    """Tests for ImageService.update."""

    @pytest.mark.asyncio
    async def test_malformed_id_touches_nothing(self, media_host, mock_db_session):
        service = ImageService(media_host)

        with pytest.raises(ValidationError, match="Invalid image ID format"):
            await service.update(mock_db_session, "zzz", image="data:...", title="x")

        media_host.upload.assert_not_called()
        media_host.destroy.assert_not_called()
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)

        with pytest.raises(NotFoundError, match="Image not Found"):
            await service.update(db_session, MISSING_ID, image=sample_image_data_uri)

        media_host.upload.assert_not_called()
        media_host.destroy.assert_not_called()

    @pytest.mark.asyncio
    async def test_title_only_keeps_media(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri, title="cat")
        url, media_id = record.image_url, record.media_id
        media_host.reset_mock()

        updated = await service.update(db_session, record.id, title="dog")

        assert updated.title == "dog"
        assert updated.image_url == url
        assert updated.media_id == media_id
        media_host.upload.assert_not_called()
        media_host.destroy.assert_not_called()

    @pytest.mark.asyncio
    async def test_omitted_title_is_cleared(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri, title="cat")

        updated = await service.update(db_session, record.id)

        assert updated.title is None
        stored = (await service.list_all(db_session))[0]
        assert stored.title is None

    @pytest.mark.asyncio
    async def test_new_image_replaces_binary(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri, title="cat")
        old_media_id = record.media_id

        updated = await service.update(
            db_session, record.id, image=sample_image_data_uri, title="cat v2"
        )

        media_host.destroy.assert_awaited_once_with(old_media_id)
        assert media_host.upload.await_count == 2
        assert updated.id == record.id
        assert updated.title == "cat v2"
        assert updated.media_id == "uploads/img2"
        assert updated.image_url.endswith("/uploads/img2.jpg")

    @pytest.mark.asyncio
    async def test_destroy_happens_before_new_upload(
        self, media_host, db_session, sample_image_data_uri
    ):
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri)
        media_host.reset_mock()

        await service.update(db_session, record.id, image=sample_image_data_uri)

        assert media_host.mock_calls == [
            call.destroy("uploads/img1"),
            call.upload(sample_image_data_uri),
        ]

    @pytest.mark.asyncio
    async def test_persist_failure_leaves_stale_media_id(
        self, media_host, db_session, sample_image_data_uri
    ):
        """
        Old binary destroyed, new binary stored, UPDATE fails: the new binary
        is discarded and the record still references the destroyed old one.
        """
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri, title="cat")
        record_id = record.id

        with patch.object(db_session, "commit", AsyncMock(side_effect=_db_failure())):
            with pytest.raises(RecordStoreError, match="Server error during image update"):
                await service.update(db_session, record_id, image=sample_image_data_uri, title="x")

        assert media_host.destroy.await_args_list == [call("uploads/img1"), call("uploads/img2")]
        stored = await db_session.get(ImageRecord, record_id)
        assert stored.media_id == "uploads/img1"
        assert stored.title == "cat"

    @pytest.mark.asyncio
    async def test_upload_failure_after_destroy(self, media_host, db_session, sample_image_data_uri):
        service = ImageService(media_host)
        record = await service.upload(db_session, image=sample_image_data_uri)
        media_host.upload.side_effect = MediaHostError()

        with pytest.raises(MediaHostError, match="Server error during image update"):
            await service.update(db_session, record.id, image=sample_image_data_uri)

        media_host.destroy.assert_awaited_once_with("uploads/img1")
