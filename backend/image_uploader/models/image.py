"""
Image Uploader Backend - ImageRecord SQLAlchemy Model
======================================================

What:  ORM model representing the `images` table.
Who:   Used by ImageService for CRUD operations and by Alembic for migrations.

Identifier format:
    Records are addressed by a 24-character hexadecimal id: 4 bytes of
    creation time (seconds, big-endian), 5 random bytes fixed per process,
    and a 3-byte counter. This is the layout of the document-store ids the
    API has always exposed, so callers validating `^[0-9a-fA-F]{24}$` keep
    working. Ascending id order is creation order within one process; across
    processes (uvicorn workers) it is creation order to one-second
    resolution, ties falling back to the per-process random bytes.

Invariants:
    - `id` is assigned exactly once, at insert.
    - `image_url` and `media_id` are always written together, from the same
      Media Host upload response.
"""

import itertools
import os
import threading
import time

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from image_uploader.database import Base

_PROCESS_RANDOM = os.urandom(5)
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
_counter_lock = threading.Lock()


def generate_object_id() -> str:
    """Return a new 24-hex identifier (timestamp + process random + counter)."""
    with _counter_lock:
        count = next(_counter) & 0xFFFFFF
    raw = (
        int(time.time()).to_bytes(4, "big")
        + _PROCESS_RANDOM
        + count.to_bytes(3, "big")
    )
    return raw.hex()


class ImageRecord(Base):
    """
    Metadata for one image stored at the Media Host.

    Lifecycle:
        1. Created by an upload, after Cloudinary accepted the binary
        2. title / image_url / media_id replaced by an update
        3. Deleted together with its Cloudinary object
    """

    __tablename__ = "images"

    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=generate_object_id,
        comment="24-hex identifier assigned at creation",
    )

    title: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Optional display title supplied by the caller",
    )

    image_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Public URL returned by the Media Host (secure_url)",
    )

    media_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Media Host identifier (public_id), needed to destroy the binary",
    )

    def __repr__(self) -> str:
        return f"<ImageRecord(id={self.id}, media_id='{self.media_id}')>"
