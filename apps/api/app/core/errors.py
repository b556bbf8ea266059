"""Standardized error responses and the domain error family."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"

logger = structlog.get_logger()


# ── Domain errors ─────────────────────────────────────────────────────────────


class DomainError(Exception):
    """Base class for errors raised by the legal workflow services.

    ``code`` is the machine-readable error name, ``status_code`` the HTTP status
    the API maps it to.
    """

    code = "domain_error"
    status_code = 400

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class NotFound(DomainError):
    code = "not_found"
    status_code = 404


class InvalidTransition(DomainError):
    """Non-adjacent, backward, unknown or otherwise disallowed stage target."""

    code = "invalid_transition"
    status_code = 400


class BlockedTransition(DomainError):
    """An open BLOCKING condition (or missing required field) prevents the move."""

    code = "blocked_transition"
    status_code = 409

    def __init__(
        self,
        message: str,
        blockers: list[str],
        warnings: list[str] | None = None,
    ) -> None:
        super().__init__(message, {"blockers": blockers, "warnings": warnings or []})
        self.blockers = blockers
        self.warnings = warnings or []


class TerminalStage(DomainError):
    code = "terminal_stage"
    status_code = 409


class StaleState(DomainError):
    """The deal moved on between the caller's read and this write."""

    code = "stale_state"
    status_code = 409


# ── Handlers ──────────────────────────────────────────────────────────────────


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a consistent JSON envelope."""
    request_id = request.headers.get("x-request-id", "unknown")

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Our team has been notified.",
            "request_id": request_id,
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Standardize HTTPException responses into the same JSON envelope."""
    request_id = request.headers.get("x-request-id", "unknown")

    if isinstance(exc.detail, dict):
        error = exc.detail.get("error", f"http_{exc.status_code}")
        message = exc.detail.get("message", str(exc.detail))
        detail: Any = exc.detail.get("detail")
    else:
        error = f"http_{exc.status_code}"
        message = str(exc.detail)
        detail = exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": error,
            "message": message,
            "detail": detail,
            "request_id": request_id,
        },
        headers=dict(exc.headers or {}),
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map a DomainError to its status code.

    Blocked transitions additionally expose ``blockers`` and ``warnings`` at the
    top level of the body so the UI can render exactly why.
    """
    request_id = request.headers.get("x-request-id", "unknown")

    logger.info(
        "domain_error",
        code=exc.code,
        message=exc.message,
        path=request.url.path,
        request_id=request_id,
    )

    content: dict[str, Any] = {
        "error": exc.code,
        "message": exc.message,
        "detail": exc.detail or None,
        "request_id": request_id,
    }
    if isinstance(exc, BlockedTransition):
        content["blockers"] = exc.blockers
        content["warnings"] = exc.warnings

    return JSONResponse(status_code=exc.status_code, content=content)
