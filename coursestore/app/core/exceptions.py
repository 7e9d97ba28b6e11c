"""
Custom exceptions and error handlers for consistent error responses.

Every error leaves the API in the same envelope as successful responses:
``{success, data, message, errors, statusCode, timestamp}``.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import List, Optional

from coursestore.app.schemas.envelope import ApiResult

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        errors: Optional[List[str]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.errors = errors or [message]
        super().__init__(message)


class InvalidRequestError(AppException):
    """Raised for empty/malformed selections and other validation failures."""

    def __init__(self, message: str = "Invalid request", errors: Optional[List[str]] = None):
        super().__init__(
            message=message,
            error_code="ERR_BAD_REQUEST_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            errors=errors
        )


class AuthenticationError(AppException):
    """Raised when the caller's identity cannot be resolved."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class PermissionDeniedError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id=None, message: Optional[str] = None):
        if message is None:
            message = f"{resource} not found"
            if resource_id is not None:
                message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND
        )


class DuplicateEntryError(AppException):
    """Raised when a unique business key already exists (e.g. course already in cart)."""

    def __init__(self, message: str = "Entry already exists", status_code: int = status.HTTP_409_CONFLICT):
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT_001",
            status_code=status_code
        )


class ResourceInUseError(AppException):
    """Raised when a row cannot be deleted because other records still reference it."""

    def __init__(self, resource: str, resource_id=None):
        message = f"{resource} is still in use and cannot be deleted"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} is still in use and cannot be deleted"
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT_002",
            status_code=status.HTTP_409_CONFLICT
        )


class InternalError(AppException):
    """Raised when a store operation fails in a way the caller cannot fix."""

    def __init__(self, message: str = "An internal server error occurred"):
        super().__init__(
            message=message,
            error_code="ERR_INTERNAL_SERVER",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


def _envelope(status_code: int, message: str, errors: List[str], headers=None) -> JSONResponse:
    body = ApiResult.error(message=message, errors=errors, status_code=status_code)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
        headers=headers
    )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return _envelope(exc.status_code, exc.message, exc.errors, headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    detail = exc.detail if isinstance(exc.detail, str) else "Operation failed"
    return _envelope(exc.status_code, detail, [detail], headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors, reported as 400 with itemized errors."""
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return _envelope(status.HTTP_400_BAD_REQUEST, "Validation error", errors)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions. Details stay in the server log."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An internal server error occurred",
        ["An internal server error occurred"]
    )
