"""
Custom exception classes for the QR Instruct API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status
from qrinstruct.repositories.base import DAOResult, ResultCode


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Malformed or missing input."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []


class BadRequestError(APIException):
    """Bad request exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="BAD_REQUEST"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED"
        )


class AuthenticationError(UnauthorizedError):
    """The request carries a principal this service does not recognise."""

    def __init__(self, detail: str = "Invalid or missing demo user"):
        super().__init__(detail)
        self.error_code = "AUTHENTICATION_ERROR"


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[Any] = None, detail: Optional[str] = None):
        if detail is None:
            detail = f"{resource} not found"
            if resource_id:
                detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class GoneError(APIException):
    """The resource exists but is no longer served."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_410_GONE,
            detail=detail,
            error_code="GONE"
        )


class DatabaseError(APIException):
    """A store operation failed."""

    def __init__(self, detail: str = "Database operation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="DATABASE_ERROR"
        )


class InternalServerError(APIException):
    """Internal server error exception."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_ERROR"
        )


# Resource specific exceptions
class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: Any):
        super().__init__("Property", property_id)


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_id: Any):
        super().__init__("Item", item_id)


class QRCodeNotFoundError(NotFoundError):
    def __init__(self, qr_id: Any):
        super().__init__("QR code", qr_id)


class OwnershipError(ForbiddenError):
    """The principal does not own the property chain of a resource."""

    def __init__(self, resource: str = "property"):
        super().__init__(f"Access denied: you don't own this {resource}")


class QRCodeInactiveError(GoneError):
    def __init__(self, qr_id: str):
        super().__init__(f"QR code {qr_id} is inactive")


class BatchLimitExceededError(ValidationError):
    def __init__(self, limit: int):
        super().__init__(f"Maximum {limit} items allowed")


def exception_for_result(result: DAOResult, resource: Optional[str] = None) -> APIException:
    """
    Map a failed DAOResult to the API exception a service should raise.

    Args:
        result: Failed repository result
        resource: Resource name used when the result carries no message
    """
    message = result.error or f"{resource or 'Resource'} operation failed"

    if result.code == ResultCode.NOT_FOUND:
        return NotFoundError(resource or "Resource", detail=message)
    if result.code == ResultCode.VALIDATION_ERROR:
        return ValidationError(message)
    if result.code == ResultCode.CONFLICT:
        return ConflictError(message)
    return DatabaseError(message)
