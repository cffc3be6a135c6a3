"""
NoteShare Backend - Notes Route Handlers
==========================================

What:  POST /upload-note (multipart upload) and GET /notes (filtered list).
How:   Extract form/query data, delegate to NoteService, wrap the result.

Request Flow (POST /upload-note):
    1. Client sends multipart/form-data with a 'file' field and metadata fields
    2. The file is read into memory (bounded by MAX_FILE_SIZE in NoteService)
    3. NoteService: store → OCR → catalog insert
    4. Response: {"success": true, "message": ..., "note": {...}}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from noteshare.dependencies import ServiceContext, get_services
from noteshare.schemas.note import (
    ErrorResponse,
    NoteFilters,
    NoteListResponse,
    NoteMetadata,
    NoteResponse,
    UploadNoteResponse,
)
from noteshare.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])


@router.post(
    "/upload-note",
    response_model=UploadNoteResponse,
    responses={
        400: {"description": "No file uploaded or file too large", "model": ErrorResponse},
        500: {"description": "Storage or catalog error", "model": ErrorResponse},
    },
    summary="Upload a note file",
    description=(
        "Stores the file, runs OCR on JPEG/PNG images, and records the note "
        "with its metadata in the catalog."
    ),
)
async def upload_note(
    file: Optional[UploadFile] = File(default=None, description="Scanned note (any type; OCR for JPEG/PNG)"),
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    subject: Optional[str] = Form(default=None),
    email: Optional[str] = Form(default=None),
    semester: Optional[str] = Form(default=None),
    class_code: Optional[str] = Form(default=None),
    professor: Optional[str] = Form(default=None),
    department: Optional[str] = Form(default=None),
    services: ServiceContext = Depends(get_services),
) -> UploadNoteResponse:
    metadata = NoteMetadata(
        title=title,
        description=description,
        subject=subject,
        email=email,
        semester=semester,
        class_code=class_code,
        professor=professor,
        department=department,
    )

    # Browsers send an empty-named part when no file was chosen
    if file is None or not file.filename:
        if file is not None:
            await file.close()
        note = await note_service.upload_note(services, metadata, None, None, None)
        return UploadNoteResponse(note=NoteResponse.model_validate(note))

    try:
        content = await file.read()
        logger.info(
            "Received upload: filename=%s, type=%s, size=%d bytes",
            file.filename or "unknown",
            file.content_type,
            len(content),
        )
        note = await note_service.upload_note(
            services,
            metadata,
            filename=file.filename,
            content=content,
            content_type=file.content_type,
        )
    finally:
        await file.close()

    return UploadNoteResponse(note=NoteResponse.model_validate(note))


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={500: {"description": "Catalog query error", "model": ErrorResponse}},
    summary="List notes with optional filters",
    description=(
        "semester and department match exactly; professor and class_code match "
        "case-insensitive substrings. Results are newest first."
    ),
)
async def list_notes(
    semester: Optional[str] = Query(default=None, description="Exact semester, e.g. 'Fall 2024'"),
    department: Optional[str] = Query(default=None, description="Exact department, e.g. 'CS'"),
    professor: Optional[str] = Query(default=None, description="Substring of the professor name"),
    class_code: Optional[str] = Query(default=None, description="Substring of the class code"),
    services: ServiceContext = Depends(get_services),
) -> NoteListResponse:
    filters = NoteFilters(
        semester=semester,
        department=department,
        professor=professor,
        class_code=class_code,
    )
    notes = await note_service.list_notes(services, filters)
    return NoteListResponse(notes=[NoteResponse.model_validate(n) for n in notes])
