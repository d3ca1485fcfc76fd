"""Create images table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `images` table holding ImageRecord metadata.
Rollback: downgrade() drops the table (all records lost; the Cloudinary
binaries they reference are left in place).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the images table. See image_uploader/models/image.py for column docs."""
    op.create_table(
        "images",
        sa.Column(
            "id",
            sa.String(24),
            nullable=False,
            comment="24-hex identifier assigned at creation",
        ),
        sa.Column(
            "title",
            sa.Text(),
            nullable=True,
            comment="Optional display title supplied by the caller",
        ),
        sa.Column(
            "image_url",
            sa.Text(),
            nullable=False,
            comment="Public URL returned by the Media Host (secure_url)",
        ),
        sa.Column(
            "media_id",
            sa.String(255),
            nullable=False,
            comment="Media Host identifier (public_id), needed to destroy the binary",
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("images")
