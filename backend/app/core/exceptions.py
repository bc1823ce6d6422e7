"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger("tours_booking.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


# Validation failures (rejected before any state change)

class BadRequestError(AppException):
    """Raised when a request is well-formed but cannot be applied."""

    def __init__(self, message: str, error_code: str = "ERR_VALIDATION_001", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidAmountError(BadRequestError):
    """Raised when a monetary or distance value is non-numeric or out of range."""

    def __init__(self, field: str, value: Any, reason: str = "must be a number"):
        super().__init__(
            message=f"Invalid value for {field}: {reason}",
            error_code="ERR_VALIDATION_002",
            details={"field": field, "value": str(value)}
        )
        self.field = field


class NoFieldsToUpdateError(BadRequestError):
    """Raised when a partial update carries no recognized field."""

    def __init__(self, resource: str = "resource"):
        super().__init__(
            message="No valid fields provided for update",
            error_code="ERR_VALIDATION_003",
            details={"resource": resource}
        )


# Conflicts

class DuplicateResourceError(AppException):
    """Raised when a unique business key is already taken."""

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            message=f"{resource} with this {field} already exists",
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "field": field, "value": value}
        )


class ConcurrentUpdateError(AppException):
    """Raised when a row changed between snapshot read and write."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"{resource} {resource_id} was modified concurrently, reload and retry",
            error_code="ERR_CONFLICT_002",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "id": resource_id}
        )


# Dependency lookups (store unavailable, whole operation aborted)

class DependencyLookupError(AppException):
    """Raised when a lookup the operation depends on fails."""

    def __init__(self, message: str, error_code: str = "ERR_DEPENDENCY_001", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details
        )


class VehicleLookupFailedError(DependencyLookupError):
    """Raised when the vehicle -> assigned driver lookup errors."""

    def __init__(self, vehicle_id: Any):
        super().__init__(
            message="Error fetching assigned driver",
            error_code="ERR_DEPENDENCY_002",
            details={"vehicle_id": vehicle_id}
        )


# Global Exception Handlers
#
# Every error leaves the API as {"error_code", "message", "details"}.

HTTP_ERROR_CODES = {
    400: "ERR_BAD_REQUEST",
    401: "ERR_UNAUTHORIZED",
    403: "ERR_FORBIDDEN",
    404: "ERR_NOT_FOUND",
    409: "ERR_CONFLICT",
    500: "ERR_INTERNAL_SERVER",
}


def error_response(status_code: int, error_code: str, message: Any, details: Dict[str, Any] = None,
                   headers: Dict[str, str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error_code": error_code, "message": message, "details": details or {}},
        headers=headers,
    )


def _correlation_id(request: Request):
    return getattr(request.state, "correlation_id", None)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Domain errors; 5xx ones are logged since nothing upstream will."""
    if exc.status_code >= 500:
        logger.error(
            exc.message,
            extra={
                "error_code": exc.error_code,
                "path": request.url.path,
                "correlation_id": _correlation_id(request),
                "details": exc.details,
            }
        )
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    error_code = HTTP_ERROR_CODES.get(exc.status_code, "ERR_UNKNOWN")
    return error_response(exc.status_code, error_code, exc.detail, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body / query failed schema validation."""
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ERR_VALIDATION",
        "Validation error",
        {"errors": jsonable_encoder(exc.errors())},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "correlation_id": _correlation_id(request),
            "exception_type": type(exc).__name__,
        }
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "ERR_INTERNAL_SERVER",
        "An internal server error occurred",
    )
