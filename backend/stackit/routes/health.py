"""
StackIt Backend — Health Check Route
======================================

What:  GET /health for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports the number of open
       notification sockets. The database is the only critical dependency:
       when it is unreachable the service is unhealthy and answers 503.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from stackit import __version__
from stackit.database import engine
from stackit.schemas.common import HealthResponse
from stackit.services.realtime import notification_hub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: set once when the app process loads the router
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        realtime_connections=notification_hub.connection_count(),
        uptime_seconds=round(time.time() - _start_time, 2),
        checked_at=datetime.now(timezone.utc),
    )
