"""
NoteShare Backend - Diagnostic Route
======================================

What:  GET /test-db-access inserts a fixed row to prove the catalog is
       reachable and writable.
When:  Manual checks during deployment. Disabled with ENABLE_DIAGNOSTICS=false,
       in which case it answers 404.
"""

import logging

from fastapi import APIRouter, Depends

from noteshare.config import settings
from noteshare.dependencies import ServiceContext, get_services
from noteshare.exceptions import NotFoundError
from noteshare.schemas.note import DiagnosticResponse, ErrorResponse, NoteResponse
from noteshare.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Diagnostics"])


@router.get(
    "/test-db-access",
    response_model=DiagnosticResponse,
    responses={500: {"description": "Catalog insert failed", "model": ErrorResponse}},
    summary="Insert a test row into the catalog",
)
async def test_db_access(services: ServiceContext = Depends(get_services)) -> DiagnosticResponse:
    if not settings.enable_diagnostics:
        raise NotFoundError(resource="endpoint", resource_id="/test-db-access")
    rows = await note_service.diagnostic_insert(services)
    logger.info("Diagnostic insert succeeded")
    return DiagnosticResponse(data=[NoteResponse.model_validate(r) for r in rows])
