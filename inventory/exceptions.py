"""
Error taxonomy shared by the HTTP service and the API client.

Services raise these; the FastAPI handlers in this module render them as
``{"error": message}`` with the matching status code. The client adapter
raises the same classes when it decodes a failed response.
"""
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Base class for every error the service or client reports."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(InventoryError):
    """Bad input shape or range. The caller should re-prompt."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, errors: Optional[list] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.errors = list(errors or [])


class NotFoundError(InventoryError):
    """The requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(InventoryError):
    """Referential integrity prevents the operation."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(InventoryError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class TransportError(InventoryError):
    """Network failure or an unexpected server response."""


async def inventory_error_handler(_request: Request, exc: InventoryError) -> JSONResponse:
    """Convert a typed error into the ``{"error": ...}`` response shape."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _describe_validation_error(error: dict) -> str:
    loc = error.get("loc") or ()
    field = loc[-1] if loc else "request"

    if error.get("type") == "json_invalid":
        return "Invalid JSON body"
    if error.get("type") == "value_error":
        return str(error.get("ctx", {}).get("error", error.get("msg")))
    if field == "product_id":
        return "Invalid product ID"
    if error.get("type") == "missing" and len(loc) <= 1:
        return "Missing body"
    if error.get("type") == "missing":
        return f"{str(field).capitalize()} is required"
    return f"Invalid {field} value"


async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request parsing failures are reported as 400 with the first problem."""
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions - returns 500."""
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )
