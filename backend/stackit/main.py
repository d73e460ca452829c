"""
StackIt Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn stackit.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  RateLimit → RequestID → Logging → GZip/CORS│
    │                                                          │
    │  Routers:     /api/auth  /api/questions  /api/answers    │
    │               /api/users /api/notifications /api/admin   │
    │               /ws/notifications  /health                 │
    │                                                          │
    │  Errors:      StackItError → its own status + code       │
    │               RequestValidationError → 400               │
    │               anything else → opaque 500                 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, check security-sensitive settings
    Shutdown: wait for pending realtime pushes, dispose the DB engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from stackit import __version__
from stackit.config import settings
from stackit.database import dispose_engine
from stackit.exceptions import RateLimitExceededError, StackItError
from stackit.middleware.logging import RequestLoggingMiddleware
from stackit.middleware.rate_limit import RateLimitMiddleware
from stackit.middleware.request_id import HEADER, RequestIDMiddleware, request_id_var
from stackit.routes import admin, answers, auth, health, notifications, questions, realtime, users
from stackit.services.realtime import notification_hub

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """Configures the root logger once; every module logs through `logging.getLogger(__name__)`."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("StackIt Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; this is a deployment warning, not a crash
        logger.warning("Configuration warning: %s", str(e))

    if settings.transfer_accepted_count:
        logger.info("Accepted-answer counter runs in transfer mode")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("StackIt Backend shutting down...")
    await notification_hub.drain()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        fields.append({"field": ".".join(loc) or "body", "message": message})
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    """
    Renders every failure as {"error", "message", "details", "request_id"}.

    StackItError subclasses carry their own status and code. Details of
    errors with expose_details=False are logged, never returned.
    """

    @app.exception_handler(StackItError)
    async def handle_app_error(request: Request, exc: StackItError):
        rid = _request_id(request)
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        content: Dict[str, Any] = {
            "error": exc.error_code,
            "message": exc.message,
            "details": (exc.context or None) if exc.expose_details else None,
            "request_id": rid,
        }
        headers = {}
        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Schema failures use the same shape as ValidationError, with every field listed."""
        rid = _request_id(request)
        fields = _field_errors(exc)
        logger.info("[%s] Request validation failed: %s", rid, fields)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_failed",
                "message": fields[0]["message"] if fields else "Validation failed",
                "details": {"fields": fields},
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "details": None,
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="StackIt API",
        description=(
            "Q&A community backend: questions, answers, votes, comments, "
            "notifications and moderation."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[HEADER, "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(questions.router)
    app.include_router(answers.router)
    app.include_router(users.router)
    app.include_router(notifications.router)
    app.include_router(admin.router)
    app.include_router(realtime.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
