"""
NoteShare Backend - Note Request/Response Schemas
===================================================

What:  Pydantic models defining the notes part of the API contract.
How:   FastAPI uses these models to serialize responses and generate the
       OpenAPI documentation. Every response body carries `success`.

Schemas are separate from the SQLAlchemy model: the catalog store hands the
service layer plain dicts, and only these fields are ever exposed.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class NoteResponse(BaseModel):
    """
    What:  Full representation of a catalog row.
    Who:   Returned inside upload, list and diagnostic responses.
    """
    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    title: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    file_url: str = Field(description="Public URL of the stored file")
    uploaded_by: Optional[str] = Field(default=None, description="Uploader email")
    semester: Optional[str] = None
    class_code: Optional[str] = None
    professor: Optional[str] = None
    department: Optional[str] = None
    ocr_text: str = Field(default="", description="Extracted text; empty when OCR was skipped or failed")
    timestamp: datetime = Field(description="Upload time (UTC ISO 8601)")

    model_config = {"from_attributes": True}


class NoteFilters(BaseModel):
    """
    What:  Optional filters for GET /notes.

    semester / department: exact match
    professor / class_code: case-insensitive substring
    Unset or empty filters are left out of the query entirely.
    """
    semester: Optional[str] = None
    department: Optional[str] = None
    professor: Optional[str] = None
    class_code: Optional[str] = None

    def active(self) -> dict:
        """Only the filters that constrain the query."""
        return {name: value for name, value in self.model_dump().items() if value}


class NoteMetadata(BaseModel):
    """Form fields sent alongside the uploaded file."""
    title: Optional[str] = None
    description: Optional[str] = None
    subject: Optional[str] = None
    email: Optional[str] = None
    semester: Optional[str] = None
    class_code: Optional[str] = None
    professor: Optional[str] = None
    department: Optional[str] = None


class UploadNoteResponse(BaseModel):
    success: bool = True
    message: str = "Note uploaded successfully"
    note: NoteResponse


class NoteListResponse(BaseModel):
    success: bool = True
    notes: List[NoteResponse] = Field(description="Matching notes, newest first")


class DiagnosticResponse(BaseModel):
    success: bool = True
    message: str = "Database access working properly"
    data: List[NoteResponse]


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every endpoint.

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "No file uploaded",
            "request_id": "550e8400"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Catalog connectivity: connected, disconnected")
    storage: str = Field(description="Active storage backend")
    ocr_engine: str = Field(description="Active OCR engine")
    uptime_seconds: float = Field(description="Seconds since service started")
