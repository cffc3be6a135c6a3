"""
NoteShare Backend - Object Storage Collaborator
=================================================

What:  Stores uploaded file bytes and issues their public URLs.
How:   `ObjectStorage` is the abstract contract. Two implementations:
       - SupabaseObjectStorage: Supabase Storage REST API over httpx
       - LocalObjectStorage:    files on local disk via aiofiles, served back
                                by this app under the same URL shape
Who:   Called by NoteService during the upload workflow.

Naming:
    Objects are stored as <uuid4>.<ext>, the extension taken from the
    original filename. UUID names carry no user input (no path traversal)
    and never collide, and both backends refuse to overwrite.

Public URL shape (both backends):
    <storage base>/storage/v1/object/public/<bucket>/<object name>
"""

import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from noteshare.exceptions import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_OBJECT_PATH = "/storage/v1/object/public"


def generate_object_name(filename: Optional[str]) -> str:
    """
    Build a globally unique object name keeping the original extension.

    The extension is whatever follows the last '.' of the filename
    ("scan.final.PNG" → "<uuid>.PNG"); a name without one yields a bare UUID.
    """
    unique = str(uuid.uuid4())
    name = filename or ""
    if "." in name:
        ext = name.rsplit(".", 1)[1]
        if ext and "/" not in ext and "\\" not in ext:
            return f"{unique}.{ext}"
    return unique


def public_object_url(storage_base: str, bucket: str, object_name: str) -> str:
    """Deterministic public URL of a stored object."""
    return f"{storage_base.rstrip('/')}{PUBLIC_OBJECT_PATH}/{bucket}/{object_name}"


def validate_upload_size(size: int, max_size: int) -> None:
    """
    Reject uploads larger than the configured maximum.

    Raises:
        ValidationError with a human-readable size limit message
    """
    if size > max_size:
        max_mb = max_size / (1024 * 1024)
        raise ValidationError(
            message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
            field="file",
            context={"max_size": max_size, "actual_size": size},
        )


class ObjectStorage(ABC):
    """
    Abstract interface for the object storage collaborator.

    Contract:
        - upload() never overwrites an existing object
        - every failure is raised as StorageError carrying the backend's message
        - public_url() is pure: same name, same URL
    """

    backend_name: str = "abstract"

    def __init__(self, storage_base: str, bucket: str):
        self.storage_base = storage_base.rstrip("/")
        self.bucket = bucket

    @abstractmethod
    async def upload(self, object_name: str, content: bytes, content_type: Optional[str]) -> None:
        ...

    def public_url(self, object_name: str) -> str:
        return public_object_url(self.storage_base, self.bucket, object_name)


class SupabaseObjectStorage(ObjectStorage):
    """
    Supabase Storage client.

    Upload: POST <supabase_url>/storage/v1/object/<bucket>/<name>
            with `x-upsert: false`, so an existing object is an error.
    """

    backend_name = "supabase"

    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str, bucket: str = "notes"):
        super().__init__(storage_base=base_url, bucket=bucket)
        self.client = client
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "x-upsert": "false",
        }

    async def upload(self, object_name: str, content: bytes, content_type: Optional[str]) -> None:
        url = f"{self.storage_base}/storage/v1/object/{self.bucket}/{object_name}"
        headers = dict(self.headers)
        headers["Content-Type"] = content_type or "application/octet-stream"

        try:
            response = await self.client.post(url, content=content, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Storage service unreachable for %s: %s", object_name, str(e))
            raise StorageError(
                message=str(e) or "Storage service is unavailable",
                context={"object": object_name, "error_type": type(e).__name__},
            )

        if response.is_error:
            logger.error(
                "Storage upload of %s failed with %d: %s",
                object_name,
                response.status_code,
                response.text,
            )
            raise StorageError(
                message=_error_message(response),
                context={
                    "object": object_name,
                    "status_code": response.status_code,
                    "body": response.text,
                },
            )

        logger.info("Object stored: %s/%s (%d bytes)", self.bucket, object_name, len(content))


class LocalObjectStorage(ObjectStorage):
    """
    Stores objects on local disk under <root>/<bucket>/<name>.

    Intended for development without a Supabase project. Files are written
    with exclusive-create mode ('xb'), matching the non-overwriting contract
    of the Supabase backend.
    """

    backend_name = "local"

    def __init__(self, root: str, public_base_url: str, bucket: str = "notes"):
        super().__init__(storage_base=public_base_url, bucket=bucket)
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalObjectStorage initialized with root=%s", self.root)

    async def upload(self, object_name: str, content: bytes, content_type: Optional[str]) -> None:
        path = self.root / self.bucket / object_name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "xb") as f:
                await f.write(content)
        except FileExistsError:
            raise StorageError(
                message="The resource already exists",
                context={"object": object_name},
            )
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            raise StorageError(
                message=e.strerror or "Failed to store uploaded file",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("File stored: %s/%s (%d bytes)", self.bucket, object_name, len(content))

    def resolve(self, bucket: str, object_name: str) -> Path:
        """
        Absolute path of a stored object, for serving it back.

        Raises NotFoundError for unknown objects and for names resolving
        outside the storage root (e.g. ../../etc/passwd).
        """
        full_path = (self.root / bucket / object_name).resolve()
        if not full_path.is_relative_to(self.root) or not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=object_name)
        return full_path


def _error_message(response: httpx.Response) -> str:
    """
    Message of a Supabase Storage error body.

    Storage answers {"statusCode": "409", "error": "Duplicate",
    "message": "The resource already exists"}.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or f"Storage service error ({response.status_code})"
