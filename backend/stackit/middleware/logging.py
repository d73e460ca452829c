"""
StackIt Backend — Access Log Middleware
=========================================

What:  Writes one `stackit.access` line per HTTP request.
How:   The line carries method, path, status, latency, the correlation id and
       the caller's address; the same values go into `extra` for structured
       handlers. The level follows the status class (5xx ERROR, 4xx WARNING,
       else INFO). Probe traffic on `/health` is not logged.

Request bodies and Authorization headers are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from stackit.middleware.request_id import current_request_id

access_logger = logging.getLogger("stackit.access")

QUIET_PATHS = frozenset({"/health"})


def level_for(status_code: int) -> int:
    """Maps an HTTP status to the access-log level."""
    if status_code >= 500:
        return logging.ERROR
    return logging.WARNING if status_code >= 400 else logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        entry = {
            "request_id": current_request_id(),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
            "client_ip": request.client.host if request.client else "unknown",
        }
        access_logger.log(
            level_for(response.status_code),
            "%(method)s %(path)s → %(status)d in %(duration_ms).1fms [%(request_id)s] %(client_ip)s",
            entry,
            extra=entry,
        )
        return response
