"""Exception handlers for the HTTP API.

Every error is returned as a JSON body of the form
``{status, message, code, correlation_id?, details?}``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from litestar import Response
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from doodle_py.exceptions import DoodleError, RoomFullError, RoomNotFoundError

if TYPE_CHECKING:
    from litestar import Request
    from litestar.exceptions import HTTPException, ValidationException

logger = structlog.get_logger(__name__)

HTTP_ERROR_CODES = {
    400: "bad_request",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    500: "internal_error",
    503: "service_unavailable",
}


@dataclass
class ErrorDetail:
    """Details about a specific error."""

    field: str | None = None
    message: str = ""
    code: str = "error"


@dataclass
class ErrorResponse:
    """Structured error response format."""

    status: str = "error"
    message: str = ""
    code: str = "internal_error"
    correlation_id: str | None = None
    details: list[ErrorDetail] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "code": self.code,
        }
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        if self.details:
            result["details"] = [{"field": d.field, "message": d.message, "code": d.code} for d in self.details]
        return result

    def to_response(self, status_code: int) -> Response[dict[str, Any]]:
        """Wrap in a JSON response."""
        return Response(content=self.to_dict(), status_code=status_code, media_type="application/json")


def get_correlation_id(request: Request) -> str | None:
    """Extract correlation ID from request state or headers."""
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id:
        return correlation_id
    return request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID")


def validation_exception_handler(request: Request, exc: ValidationException) -> Response[dict[str, Any]]:
    """Handle request validation errors with per-field details."""
    correlation_id = get_correlation_id(request)

    details: list[ErrorDetail] = []
    for error in exc.extra or []:
        if isinstance(error, dict):
            details.append(
                ErrorDetail(
                    field=error.get("key") or error.get("source"),
                    message=str(error.get("message", error)),
                    code="validation_error",
                )
            )
        else:
            details.append(ErrorDetail(message=str(error), code="validation_error"))
    if not details:
        details.append(ErrorDetail(message=str(exc.detail), code="validation_error"))

    logger.warning(
        "Validation error",
        path=request.url.path,
        method=request.method,
        error_count=len(details),
    )
    return ErrorResponse(
        message="Validation failed",
        code="validation_error",
        correlation_id=correlation_id,
        details=details,
    ).to_response(HTTP_400_BAD_REQUEST)


def http_exception_handler(request: Request, exc: HTTPException) -> Response[dict[str, Any]]:
    """Handle Litestar HTTP exceptions."""
    error_code = HTTP_ERROR_CODES.get(exc.status_code, "error")
    log_method = logger.warning if exc.status_code < 500 else logger.error
    log_method(
        "HTTP exception",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        error_code=error_code,
    )
    return ErrorResponse(
        message=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        code=error_code,
        correlation_id=get_correlation_id(request),
    ).to_response(exc.status_code)


def doodle_error_handler(request: Request, exc: DoodleError) -> Response[dict[str, Any]]:
    """Handle domain errors.

    Unknown rooms map to 404, full rooms to 409 and every other domain
    error to 400.
    """
    if isinstance(exc, RoomNotFoundError):
        status_code = HTTP_404_NOT_FOUND
    elif isinstance(exc, RoomFullError):
        status_code = HTTP_409_CONFLICT
    else:
        status_code = HTTP_400_BAD_REQUEST

    logger.warning("Domain error", code=exc.code, error=str(exc), path=request.url.path)
    return ErrorResponse(
        message=str(exc),
        code=exc.code,
        correlation_id=get_correlation_id(request),
    ).to_response(status_code)


def generic_exception_handler(request: Request, exc: Exception) -> Response[dict[str, Any]]:
    """Handle unexpected exceptions.

    Logs the full exception but returns a safe message to the client.
    """
    logger.exception(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return ErrorResponse(
        message="An unexpected error occurred. Please try again later.",
        code="internal_error",
        correlation_id=get_correlation_id(request),
    ).to_response(HTTP_500_INTERNAL_SERVER_ERROR)


def get_exception_handlers() -> dict:
    """Exception handlers keyed by exception type."""
    from litestar.exceptions import HTTPException, ValidationException

    return {
        ValidationException: validation_exception_handler,
        HTTPException: http_exception_handler,
        DoodleError: doodle_error_handler,
        Exception: generic_exception_handler,
    }
