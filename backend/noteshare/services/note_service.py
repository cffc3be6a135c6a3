"""
NoteShare Backend - Note Service (Business Logic Orchestrator)
================================================================

What:  Coordinates the upload → store → OCR → catalog workflow and the
       catalog queries behind GET /notes.
How:   Composes the storage, OCR and catalog collaborators from a
       ServiceContext passed in on every call.
Who:   Called by route handlers.

Orchestration Flow (POST /upload-note):
    ┌──────────┐    ┌───────────┐    ┌──────────────┐    ┌───────────┐
    │ Validate │───▶│  Storage  │───▶│  OCR (jpeg/  │───▶│  Catalog  │
    │  (file)  │    │  upload   │    │  png only)   │    │  insert   │
    └──────────┘    └───────────┘    └──────────────┘    └───────────┘

    Validate fails → ValidationError, nothing else runs
    Storage fails  → StorageError, no catalog row is written
    OCR fails      → logged, ocr_text = "", workflow continues
    Catalog fails  → CatalogError; the stored object stays orphaned

NoteService is stateless; the same instance serves every request.
"""

import logging
from typing import Any, Dict, List, Optional

from noteshare.config import settings
from noteshare.dependencies import ServiceContext
from noteshare.exceptions import CatalogError, OCRError, ValidationError
from noteshare.schemas.note import NoteFilters, NoteMetadata
from noteshare.services.ocr_service import should_run_ocr
from noteshare.services.storage_service import generate_object_name, validate_upload_size

logger = logging.getLogger(__name__)

# Fixed row written by GET /test-db-access
DIAGNOSTIC_NOTE = {
    "title": "Test Note",
    "description": "Testing database access",
    "subject": "Debug",
    "file_url": "https://www.see.leeds.ac.uk/geo-maths/basic_maths.pdf",
    "uploaded_by": "test@spelman.edu",
}


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - upload_note(): store a file, extract its text, catalog it
        - list_notes(): filtered catalog query, newest first
        - diagnostic_insert(): fixed-payload insert proving catalog access
    """

    def __init__(self, max_file_size: Optional[int] = None):
        self.max_file_size = max_file_size or settings.max_file_size

    async def upload_note(
        self,
        services: ServiceContext,
        metadata: NoteMetadata,
        filename: Optional[str],
        content: Optional[bytes],
        content_type: Optional[str],
    ) -> Dict[str, Any]:
        """
        Complete upload workflow.

        Args:
            services:     Collaborators for this request
            metadata:     Form fields (title, email, semester, ...)
            filename:     Original filename, source of the stored extension
            content:      Raw file bytes; None when no file was sent
            content_type: Client-declared MIME type, stored with the object
                          and used to decide whether OCR runs

        Returns:
            The inserted catalog row.

        Raises:
            ValidationError: no file, or file too large
            StorageError:    storing the file failed
            CatalogError:    inserting the row failed
        """
        # ── Step 1: Validate (no collaborator call before this passes) ──
        if content is None:
            raise ValidationError(message="No file uploaded", field="file")
        validate_upload_size(len(content), self.max_file_size)

        # ── Step 2: Store the file ────────────────────────────────────────
        object_name = generate_object_name(filename)
        await services.storage.upload(object_name, content, content_type)

        # ── Step 3: Public URL ────────────────────────────────────────────
        file_url = services.storage.public_url(object_name)

        # ── Step 4: OCR, images only, failures absorbed ───────────────────
        ocr_text = await self.extract_text(services, content, content_type)

        # ── Step 5: Catalog row ───────────────────────────────────────────
        fields = {
            "title": metadata.title,
            "description": metadata.description,
            "subject": metadata.subject,
            "file_url": file_url,
            "uploaded_by": metadata.email,
            "semester": metadata.semester,
            "class_code": metadata.class_code,
            "professor": metadata.professor,
            "department": metadata.department,
            "ocr_text": ocr_text,
        }
        try:
            note = await services.catalog.insert_note(fields)
        except CatalogError:
            # TODO: schedule deletion of orphaned objects once storage exposes delete()
            logger.error("Catalog insert failed; stored object %s is orphaned", object_name)
            raise

        logger.info("Note %s uploaded by %s (%s)", note.get("id"), metadata.email, object_name)
        return note

    async def extract_text(
        self,
        services: ServiceContext,
        content: bytes,
        content_type: Optional[str],
    ) -> str:
        """
        Run OCR when the content type is exactly image/jpeg or image/png.

        Returns "" for other types and whenever the engine fails.
        """
        if not should_run_ocr(content_type):
            logger.info("Skipping OCR: unsupported file type: %s", content_type)
            return ""
        try:
            return await services.ocr.extract_text(content)
        except OCRError as e:
            logger.error("OCR failed (%s): %s", services.ocr.engine_name, e.context)
        except Exception as e:
            logger.error("OCR failed unexpectedly: %s", str(e), exc_info=True)
        return ""

    async def list_notes(
        self,
        services: ServiceContext,
        filters: Optional[NoteFilters] = None,
    ) -> List[Dict[str, Any]]:
        """
        Filtered listing, newest first.

        semester/department match exactly; professor/class_code match as
        case-insensitive substrings. Empty filters are ignored.
        """
        active = filters.active() if filters else {}
        notes = await services.catalog.query_notes(active)
        logger.debug("Listed %d notes with filters %s", len(notes), active)
        return notes

    async def diagnostic_insert(self, services: ServiceContext) -> List[Dict[str, Any]]:
        """Insert the fixed test row; same failure semantics as an upload's insert."""
        note = await services.catalog.insert_note(DIAGNOSTIC_NOTE)
        return [note]


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
