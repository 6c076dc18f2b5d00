"""
Error Handlers

Centralized exception handlers for the FastAPI application.
"""

from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pymongo.errors import PyMongoError

from ...domain.errors import DomainError, StorageError
from ...utils.logger import get_logger, get_correlation_id

logger = get_logger(__name__)


def _correlation_headers() -> Dict[str, str]:
    return {"X-Correlation-Id": get_correlation_id() or ""}


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """Reduce pydantic error records to JSON-safe field/message pairs"""
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Handle domain-specific errors (business logic errors).

    These are expected errors that occur during normal operation,
    such as validation failures, not found errors, permission denied, etc.
    """
    logger.warning(
        f"Domain error: {exc.error_code} - {exc.message}",
        extra={"error_code": exc.error_code, "details": exc.details}
    )
    headers = _correlation_headers()
    if exc.http_status == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
        headers=headers
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    These occur when request data doesn't match expected schema.
    """
    errors = _field_errors(exc)
    logger.warning(
        f"Validation error: {errors}, "
        f"path={request.url.path}, "
        f"method={request.method}"
    )
    fields = ", ".join(e["field"] for e in errors if e["field"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": f"Invalid input: {fields}" if fields else "Request validation failed",
                "details": {"errors": errors}
            }
        },
        headers=_correlation_headers()
    )


async def storage_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    """
    Handle data store failures.

    The client gets a generic message; the cause stays in the server log.
    """
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}", exc_info=True)
    error = StorageError("A storage error occurred, please try again")
    return JSONResponse(
        status_code=error.http_status,
        content=error.to_dict(),
        headers=_correlation_headers()
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    These are unhandled exceptions that should not occur during normal operation.
    Logs full stack trace for debugging.
    """
    logger.error(f"Unexpected error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": {"hint": "Check server logs for details"}
            }
        },
        headers=_correlation_headers()
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, storage_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
