"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2024-09-01 00:00:00.000000+00:00

What:  Creates the `notes` catalog table and its newest-first index.
       Column meanings are documented in noteshare/models/note.py.

Rollback: downgrade() drops the table (all catalog rows are lost; stored
files are untouched).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Unique identifier"),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subject", sa.Text(), nullable=True),
        sa.Column("file_url", sa.Text(), nullable=False, comment="Public URL of the uploaded file"),
        sa.Column("uploaded_by", sa.String(320), nullable=True),
        sa.Column("semester", sa.String(100), nullable=True),
        sa.Column("class_code", sa.String(100), nullable=True),
        sa.Column("professor", sa.String(255), nullable=True),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column(
            "ocr_text",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Text extracted by OCR; empty when skipped or failed",
        ),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When this note was uploaded (UTC)",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_notes"),
    )

    op.create_index(
        "idx_notes_timestamp",
        "notes",
        [sa.text("timestamp DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_timestamp", table_name="notes")
    op.drop_table("notes")
