"""Error Handlers — every failure leaves the API as the same {"error": {...}} envelope.

Invariants:
    - ThaiAtError → its own to_response() body and http_status
    - Oracle rate limits carry a Retry-After header (whole seconds, rounded up)
      whenever the upstream told us how long to wait
    - Malformed form/admin input → 400 VALIDATION_ERROR with one detail per field,
      field named by its location ("body.birth_date")
    - Anything else → 500 INTERNAL_ERROR with a Vietnamese message, no internals

Design Decisions:
    - Handlers are plain module functions added with add_exception_handler, so
      tests and main.py share one registration table
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from thaiat.core.errors import ErrorCategory, ErrorSeverity, ThaiAtError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Đã có lỗi xảy ra. Vui lòng thử lại sau."


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
    **extra,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }


def retry_after_header(exc: ThaiAtError) -> dict[str, str]:
    """Retry-After header for errors that know their backoff, else {}."""
    retry_after_ms = exc.context.retry_after_ms
    if not retry_after_ms or retry_after_ms <= 0:
        return {}
    return {"Retry-After": str(math.ceil(retry_after_ms / 1000))}


async def handle_thaiat_error(request: Request, exc: ThaiAtError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(
            f"{exc.code} on {request.url.path}: {exc.message}",
            extra={"error_code": exc.code, "category": exc.category.value},
        )
    else:
        logger.warning(
            f"{exc.code} on {request.url.path}: {exc.message}",
            extra={"error_code": exc.code},
        )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=retry_after_header(exc),
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected input on {request.url.path}",
        extra={"fields": [d["field"] for d in details]},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING,
            details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}", exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE,
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ThaiAtError, handle_thaiat_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
