"""
StackIt Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for every business-rule failure.
How:   Each exception class carries a message, an optional context dict, the
       HTTP status it maps to and a machine-readable error code. A single
       global handler (registered in main.py) renders them as
       {"error", "message", "details", "request_id"}.
Who:   Raised by services and route dependencies; caught by global handlers.

Exception Hierarchy:
    StackItError (base)
    ├── ValidationError          → 400 Bad Request (input shape or length)
    ├── AuthenticationError      → 401 Unauthorized (missing/invalid token)
    ├── ForbiddenError           → 403 Forbidden (relationship or business rule)
    ├── NotFoundError            → 404 Not Found (absent or soft-deleted)
    ├── ConflictError            → 409 Conflict (duplicate answer, closed question)
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error (opaque to clients)

None of these are retried by the server; retrying is the client's call.
"""

from typing import Any, Dict, List, Optional


class StackItError(Exception):
    """
    Base exception for all StackIt application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional info; returned as `details` unless `expose_details`
                  is False, in which case it is only logged.
    """

    status_code: int = 500
    error_code: str = "server_error"
    expose_details: bool = True

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StackItError):
    """
    Raised when client input violates a declared constraint.

    Carries per-field messages in `context["fields"]` so the client can
    highlight every offending input at once. Nothing is applied when raised.

    Example response:
        {
            "error": "validation_failed",
            "message": "Answer must be at least 20 characters long",
            "details": {"fields": [{"field": "content", "message": "..."}]}
        }
    """

    status_code = 400
    error_code = "validation_failed"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        fields: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        collected = list(fields or [])
        if field:
            collected.insert(0, {"field": field, "message": message})
        if collected:
            ctx["fields"] = collected
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(StackItError):
    """Raised when a request needs an actor but carries no valid token."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(StackItError):
    """
    Raised when the actor lacks the required relationship or breaks a rule.

    Covers: not the author, not the recipient, not an admin, banned actor,
    voting on or answering one's own content, banning/deleting an admin.
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StackItError):
    """
    Raised when a requested entity is absent or soft-deleted.

    Soft-deleted questions and answers, and banned users on public profile
    routes, are reported exactly like missing ones.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(StackItError):
    """Raised when the request collides with current state (duplicate answer, closed question)."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The request conflicts with the current state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(StackItError):
    """
    Raised when a client exceeds the per-IP write rate limit.

    Response includes a Retry-After header for HTTP-compliant clients.
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(StackItError):
    """
    Raised when a store operation fails unexpectedly.

    Security Note:
        The message returned to the client is always generic. The context
        (statement, constraint name, original exception type) is logged
        server-side only.
    """

    status_code = 500
    error_code = "server_error"
    expose_details = False

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
