"""
NoteShare Backend - Front-end Fallback Route
==============================================

What:  Serves the built single-page front-end.
How:   GET /{path}: an existing file inside FRONTEND_BUILD_DIR is returned as
       is (static assets); anything else gets index.html so client-side
       routing can take over. A trailing slash redirects to the path without
       it, so /notes/ reaches the API instead of the front-end.
       Any other method on a path no API route handles is a 404.
Who:   Registered LAST in main.py so it never shadows an API route.
"""

from pathlib import Path

from fastapi import APIRouter, Request, Response
from fastapi.responses import FileResponse, RedirectResponse

from noteshare.config import settings
from noteshare.exceptions import NotFoundError

router = APIRouter(tags=["Frontend"])


def resolve_frontend_file(build_dir: Path, requested: str) -> Path:
    """
    Pick the file to serve for a request path.

    Paths resolving outside build_dir fall back to index.html.
    Raises NotFoundError when the build has no index.html.
    """
    root = build_dir.resolve()
    if requested:
        candidate = (root / requested).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return candidate

    index = root / "index.html"
    if not index.is_file():
        raise NotFoundError(resource="front-end build", resource_id=str(index))
    return index


@router.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(request: Request, full_path: str) -> Response:
    stripped = full_path.rstrip("/")
    if stripped != full_path and stripped:
        return RedirectResponse(str(request.url.replace(path=f"/{stripped}")))
    return FileResponse(resolve_frontend_file(Path(settings.frontend_build_dir), full_path))


@router.api_route(
    "/{full_path:path}",
    methods=["POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def unknown_route(request: Request, full_path: str) -> None:
    raise NotFoundError(resource="route", resource_id=f"{request.method} /{full_path}")
