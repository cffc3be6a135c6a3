"""
NoteShare Backend - Local Object Serving
==========================================

What:  GET /storage/v1/object/public/{bucket}/{name} for the local storage
       backend, mirroring the Supabase public URL shape so stored file_url
       values resolve against this app.
Who:   Mounted by main.py only when STORAGE_BACKEND=local.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from noteshare.dependencies import ServiceContext, get_services
from noteshare.exceptions import NotFoundError
from noteshare.services.storage_service import PUBLIC_OBJECT_PATH, LocalObjectStorage

router = APIRouter(tags=["Files"])


@router.get(
    PUBLIC_OBJECT_PATH + "/{bucket}/{object_name}",
    summary="Serve a locally stored object",
    responses={200: {"description": "Stored file"}, 404: {"description": "File not found"}},
)
async def serve_object(
    bucket: str,
    object_name: str,
    services: ServiceContext = Depends(get_services),
) -> FileResponse:
    storage = services.storage
    if not isinstance(storage, LocalObjectStorage):
        raise NotFoundError(resource="file", resource_id=object_name)

    path = storage.resolve(bucket, object_name)
    # Objects never change after upload
    return FileResponse(path=str(path), headers={"Cache-Control": "public, max-age=86400"})
