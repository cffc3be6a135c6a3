"""
NoteShare Backend - Request Logging Middleware
================================================

What:  One access-log line per API request: method, path, status, duration,
       request size, request ID and client IP.
How:   Times call_next(); the level follows the status class.

Not logged:
    - /health checks and front-end static assets (/static/...)
    - request bodies, which carry passwords and note files
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from noteshare.middleware.request_id import request_id_var

logger = logging.getLogger("noteshare.access")

QUIET_PATHS = frozenset({"/health", "/favicon.ico"})
QUIET_PREFIXES = ("/static/",)


def _is_quiet(path: str) -> bool:
    return path in QUIET_PATHS or path.startswith(QUIET_PREFIXES)


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for the API; reads the ID set by RequestIDMiddleware."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if _is_quiet(path):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        # Uploads: the multipart body size, as declared by the client
        size = int(request.headers.get("content-length") or 0)

        logger.log(
            _level_for(response.status_code),
            "[%s] %s %s -> %d in %.1fms (%d bytes in) from %s",
            rid,
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            size,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "request_bytes": size,
            },
        )
        return response
