"""
Utility modules for the QR Instruct API.
"""

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    AuthenticationError,
    ForbiddenError,
    ConflictError,
    GoneError,
    BadRequestError,
    DatabaseError,
    InternalServerError,
    PropertyNotFoundError,
    ItemNotFoundError,
    QRCodeNotFoundError,
    OwnershipError,
    QRCodeInactiveError,
    BatchLimitExceededError,
    exception_for_result
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "AuthenticationError",
    "ForbiddenError",
    "ConflictError",
    "GoneError",
    "BadRequestError",
    "DatabaseError",
    "InternalServerError",
    "PropertyNotFoundError",
    "ItemNotFoundError",
    "QRCodeNotFoundError",
    "OwnershipError",
    "QRCodeInactiveError",
    "BatchLimitExceededError",
    "exception_for_result",
]
