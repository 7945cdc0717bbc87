"""Error Handlers — map every exception that escapes a route to the JSON error envelope.

Invariants:
    - ChainlabError -> exc.http_status + exc.to_response()
    - RequestValidationError -> 400 VALIDATION_ERROR with one entry per failing field
    - Anything else -> 500 INTERNAL_ERROR; the exception text stays in the logs
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chainlab.core.errors import ChainlabError, ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)


def _envelope(code: str, message: str, category: ErrorCategory, severity: ErrorSeverity, **extra) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }


async def handle_chainlab_error(request: Request, exc: ChainlabError) -> JSONResponse:
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level, f"{exc.code} on {request.url.path}: {exc.message}",
        extra={"error_code": exc.code, "session_id": exc.context.session_id},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(f"Rejected request to {request.url.path}: {len(details)} invalid field(s)")
    return JSONResponse(
        status_code=400,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChainlabError, handle_chainlab_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
