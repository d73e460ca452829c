"""
StackIt Backend — Write Rate Limiting Middleware
==================================================

What:  Per-IP sliding-window limit on mutating requests (POST, PUT, PATCH,
       DELETE). Reads are never limited.
How:   Keeps the timestamps of recent writes per client IP. When the window
       already holds `rate_limit_requests` entries the request is answered
       with 429 and a Retry-After header, using the same error body as every
       other application error.

Single-process only: counters live in this worker's memory.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from stackit.config import settings
from stackit.exceptions import RateLimitExceededError
from stackit.middleware.request_id import HEADER

logger = logging.getLogger(__name__)

LIMITED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method not in LIMITED_METHODS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        recent = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = recent

        if len(recent) >= settings.rate_limit_requests:
            retry_after = int(recent[0] + settings.rate_limit_window - now) + 1
            logger.warning(
                "Write rate limit exceeded for %s: %d requests in %ds",
                client_ip, len(recent), settings.rate_limit_window,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": exc.error_code,
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request.headers.get(HEADER),
                },
                headers={"Retry-After": str(retry_after)},
            )

        recent.append(now)
        self._seen += 1
        if self._seen % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive = [
            ip for ip, stamps in self._requests.items() if not stamps or stamps[-1] < window_start
        ]
        for ip in inactive:
            del self._requests[ip]
        if inactive:
            logger.debug("Dropped %d idle rate-limit entries", len(inactive))
