"""
NoteShare Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions, one per error kind the API exposes.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"success": false, ...}` JSON with the matching status code.
Who:   Raised by collaborator clients and services; caught by global handlers.

Exception Hierarchy:
    NoteShareError (base)
    ├── ValidationError          → 400 Bad Request (caught before any collaborator call)
    ├── AuthError                → 401 Unauthorized (always the same generic message)
    ├── NotFoundError            → 404 Not Found
    ├── OCRError                 → never reaches a handler (absorbed by NoteService)
    └── ServiceError             → 500 Internal Server Error (message passed through)
        ├── IdentityServiceError
        ├── StorageError
        └── CatalogError

The `context` dict is logged server-side and never serialized to the client,
so collaborator internals (SQL text, raw Supabase payloads) stay out of the
HTTP contract.
"""

from typing import Any, Dict, Optional


class NoteShareError(Exception):
    """
    Base exception for all NoteShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteShareError):
    """
    Raised when client input fails validation.

    When:    Email outside the allowed domains, missing upload file, oversized
             upload, rejected verification code.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthError(NoteShareError):
    """
    Raised when credentials are rejected.

    The message is deliberately non-descriptive: unknown user, wrong password
    and an unreachable identity service all produce the same response.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Invalid email or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteShareError):
    """
    Raised when a requested resource does not exist.

    When:    Front-end build missing, unknown stored object, disabled endpoint.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class OCRError(NoteShareError):
    """
    Raised by an OCR engine when text extraction fails.

    Never surfaced to clients: NoteService logs it and stores an empty
    `ocr_text` instead.
    """

    def __init__(
        self,
        message: str = "Text extraction failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceError(NoteShareError):
    """
    Raised when an external collaborator (identity, storage, catalog) fails.

    HTTP:    500 Internal Server Error
    The message is returned to the client as-is; subclasses choose a
    message that is safe to expose and put raw details in `context`.
    No retries are attempted anywhere.
    """

    def __init__(
        self,
        message: str = "A service error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdentityServiceError(ServiceError):
    """
    Raised by the identity collaborator.

    Attributes:
        rejected:    True when the identity service answered with an error
                     (bad code, duplicate user, wrong password). False when
                     it could not be reached or answered with garbage.
        status_code: HTTP status returned by the identity service, if any.
    """

    def __init__(
        self,
        message: str = "Identity service error",
        rejected: bool = False,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.rejected = rejected
        self.status_code = status_code


class StorageError(ServiceError):
    """Raised when storing a file with the object storage collaborator fails."""

    def __init__(
        self,
        message: str = "Failed to store uploaded file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CatalogError(ServiceError):
    """
    Raised when a catalog query or insert fails.

    The message is the driver's own error text. The full SQLAlchemy error,
    with the statement and its parameters, is kept in `context` only.
    """

    def __init__(
        self,
        message: str = "A catalog error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
