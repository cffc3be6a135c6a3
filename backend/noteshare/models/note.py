"""
NoteShare Backend - Note SQLAlchemy Model
===========================================

What:  ORM model representing the `notes` table (the notes catalog).
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by SqlCatalogStore for inserts and filtered queries.

Table Design:
    - UUID primary key, generated in Python so the row is complete before flush
    - file_url: public URL of the stored object (never null; a row only exists
      after its file was stored)
    - ocr_text: text extracted from image uploads; empty string when OCR was
      skipped or failed
    - semester / department: filtered by exact match
    - professor / class_code: filtered by case-insensitive substring
    - timestamp: UTC insert time, drives newest-first ordering

Rows are immutable after insert: the API exposes no update or delete.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from noteshare.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    One uploaded note and its metadata.

    Query Patterns:
        - List notes: SELECT ... WHERE <filters> ORDER BY timestamp DESC
          → Uses idx_notes_timestamp
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subject: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # What: Public URL of the stored object
    # Format: <storage base>/storage/v1/object/public/notes/<uuid>.<ext>
    file_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Public URL of the uploaded file",
    )

    # What: Email of the uploader, as sent in the upload form
    uploaded_by: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)

    semester: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    class_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    professor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    ocr_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Text extracted by OCR; empty when skipped or failed",
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="When this note was uploaded (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_timestamp", timestamp.desc()),
    )

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain-dict view of the row, the shape every catalog store returns.

        SQLite hands back naive datetimes; they are stored as UTC, so the
        timezone is reattached here.
        """
        ts = self.timestamp
        if ts is not None and ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "subject": self.subject,
            "file_url": self.file_url,
            "uploaded_by": self.uploaded_by,
            "semester": self.semester,
            "class_code": self.class_code,
            "professor": self.professor,
            "department": self.department,
            "ocr_text": self.ocr_text,
            "timestamp": ts,
        }

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', timestamp='{self.timestamp}')>"
