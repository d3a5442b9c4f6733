"""Error Handlers: map exceptions onto the structured JSON error envelope.

Invariants:
    - NoesisError -> its own http_status and to_response() body
    - RequestValidationError -> 400 with one entry per offending field
    - Anything else -> 500 with a fixed message; internals never leak
    - Every handler logs with the request path (and session id when routed)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from noesis.core.errors import ErrorCategory, ErrorSeverity, NoesisError

logger = logging.getLogger(__name__)


def _log_extra(request: Request, **fields) -> dict:
    extra = {"path": request.url.path, **fields}
    session_id = request.path_params.get("session_id")
    if session_id is not None:
        extra["session_id"] = str(session_id)
    return extra


def _envelope(code: str, message: str, category: ErrorCategory,
              severity: ErrorSeverity, **more) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **more,
        },
    }


async def handle_noesis_error(request: Request, exc: NoesisError) -> JSONResponse:
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level, f"{exc.code}: {exc.message}",
        extra=_log_extra(request, error_code=exc.code),
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Invalid request body ({len(details)} field error(s))",
        extra=_log_extra(request, error_code="VALIDATION_ERROR"),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception: {exc}", exc_info=True,
        extra=_log_extra(request, error_code="INTERNAL_ERROR"),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the three global handlers on the app."""
    app.add_exception_handler(NoesisError, handle_noesis_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
