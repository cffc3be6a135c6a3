"""
NoteShare Backend - Catalog Store Collaborator
================================================

What:  Structured persistence of note metadata with filtered queries.
How:   `CatalogStore` is the abstract contract; `SqlCatalogStore` implements it
       with async SQLAlchemy against the `notes` table, one session per call.
Who:   Called by NoteService (upload, list, diagnostic insert).

Query semantics (query_notes):
    semester, department  → exact match            (column = :value)
    professor, class_code → case-insensitive substring, wildcards escaped
    Filters AND together; unset/empty filters are not applied.
    Results are ordered by timestamp, newest first.

Every database failure is raised as CatalogError carrying the driver's own
message; the SQL statement and parameters go to the error context only.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import desc, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from noteshare.exceptions import CatalogError
from noteshare.models.note import Note

logger = logging.getLogger(__name__)

EXACT_FILTERS = ("semester", "department")
SUBSTRING_FILTERS = ("professor", "class_code")

# Columns a caller may set on insert; id and timestamp are always generated
INSERTABLE_FIELDS = (
    "title",
    "description",
    "subject",
    "file_url",
    "uploaded_by",
    "semester",
    "class_code",
    "professor",
    "department",
    "ocr_text",
)


class CatalogStore(ABC):
    """Abstract interface for the catalog store collaborator."""

    @abstractmethod
    async def insert_note(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert one row and return it as stored (id and timestamp included).

        Raises CatalogError.
        """
        ...

    @abstractmethod
    async def query_notes(self, filters: Optional[Mapping[str, Optional[str]]] = None) -> List[Dict[str, Any]]:
        """Return matching rows, newest first. Raises CatalogError."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Lightweight connectivity check for the health endpoint."""
        ...


class SqlCatalogStore(CatalogStore):
    """SQLAlchemy-backed catalog over the `notes` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def insert_note(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        values = {name: fields.get(name) for name in INSERTABLE_FIELDS if name in fields}
        if values.get("ocr_text") is None:
            values["ocr_text"] = ""
        note = Note(**values)

        try:
            async with self.session_factory() as session:
                session.add(note)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Catalog insert failed: %s", str(e), exc_info=True)
            raise CatalogError(
                message=_db_error_message(e),
                context={"error_type": type(e).__name__, "error": str(e)},
            )

        logger.info("Note %s inserted into catalog", note.id)
        return note.to_dict()

    async def query_notes(self, filters: Optional[Mapping[str, Optional[str]]] = None) -> List[Dict[str, Any]]:
        query = select(Note)
        filters = filters or {}

        for name in EXACT_FILTERS:
            value = filters.get(name)
            if value:
                query = query.where(getattr(Note, name) == value)

        for name in SUBSTRING_FILTERS:
            value = filters.get(name)
            if value:
                query = query.where(getattr(Note, name).icontains(value, autoescape=True))

        query = query.order_by(desc(Note.timestamp))

        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Catalog query failed: %s", str(e), exc_info=True)
            raise CatalogError(
                message=_db_error_message(e),
                context={"error_type": type(e).__name__, "error": str(e)},
            )

        return [note.to_dict() for note in notes]

    async def ping(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Catalog ping failed: %s", str(e))
            return False


def _db_error_message(error: SQLAlchemyError) -> str:
    """
    The driver's message without SQLAlchemy's statement and parameters.

    "(sqlite3.OperationalError) no such table: notes [SQL: ...]"
    → "no such table: notes"
    """
    orig = getattr(error, "orig", None)
    text_ = str(orig) if orig is not None else str(error)
    first_line = text_.strip().splitlines()[0] if text_.strip() else ""
    return first_line or "Database error"
