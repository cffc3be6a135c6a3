"""
NoteShare Backend - Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer health checks.
How:   Pings the catalog with SELECT 1 and reports the configured storage
       backend and OCR engine.

Status levels:
    - healthy:   catalog reachable
    - unhealthy: catalog unreachable (notes can be neither listed nor saved)

Identity and storage are remote services without a cheap liveness call; their
health shows up as 500s on the endpoints that use them.
"""

import logging
import time

from fastapi import APIRouter, Depends

from noteshare import __version__
from noteshare.dependencies import ServiceContext, get_services
from noteshare.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(services: ServiceContext = Depends(get_services)) -> HealthResponse:
    connected = await services.catalog.ping()
    if not connected:
        logger.warning("Health check: catalog unreachable")

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        storage=services.storage.backend_name,
        ocr_engine=services.ocr.engine_name,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
