"""Error → HTTP response mapping.

Every failure leaves the API as ``{"error": message, "code": CODE}`` with
the status carried by the domain error class.
"""

from typing import Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mealscan.domain.shared.errors import DomainError

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"
INVALID_REQUEST_CODE = "INVALID_REQUEST"
PAYLOAD_TOO_LARGE_CODE = "PAYLOAD_TOO_LARGE"


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code})


def domain_error_response(exc: DomainError, provider: Optional[str] = None) -> JSONResponse:
    """Log and map a DomainError to its status and body."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "analysis.failed",
        code=exc.code,
        status=exc.status_code,
        provider=provider,
        error=exc.message,
    )
    return error_response(exc.status_code, exc.message, exc.code)


def internal_error_response(exc: Exception) -> JSONResponse:
    """Map an unexpected exception to 500 (message kept for the client)."""
    logger.exception(
        "analysis.failed",
        code=INTERNAL_ERROR_CODE,
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc) or "Internal server error",
        INTERNAL_ERROR_CODE,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed JSON or wrong field types → 400 INVALID_REQUEST."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request body."
    logger.warning(
        "request.invalid",
        path=request.url.path,
        code=INVALID_REQUEST_CODE,
        error=message,
    )
    return error_response(status.HTTP_400_BAD_REQUEST, message, INVALID_REQUEST_CODE)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return domain_error_response(exc)
