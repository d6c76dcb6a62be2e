"""
Error response schemas for API documentation.
Mirrors the envelope produced by ErrorHandlerService.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class ErrorDetail(BaseModel):
    """Schema for individual field error detail."""

    field: Optional[str] = Field(
        None,
        description="Field path that caused the error",
        examples=["body -> name"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Field required"]
    )

    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["missing"]
    )


class ErrorResponse(BaseModel):
    """Schema for every error body returned by the API."""

    success: bool = Field(False, description="Always false for errors")

    message: str = Field(
        ...,
        description="HTTP status phrase",
        examples=["Not Found"]
    )

    error: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Property not found with ID: 7d0c..."]
    )

    code: str = Field(
        ...,
        description="Error code identifier",
        examples=["NOT_FOUND"]
    )

    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Field errors for validation failures"
    )

    request_id: Optional[str] = Field(
        None,
        description="Request identifier for tracking",
        examples=["abc12345"]
    )


def _example(description: str, message: str, error: str, code: str) -> dict:
    return {
        "description": description,
        "model": ErrorResponse,
        "content": {
            "application/json": {
                "example": {
                    "success": False,
                    "message": message,
                    "error": error,
                    "code": code,
                    "request_id": "abc12345"
                }
            }
        }
    }


COMMON_ERROR_RESPONSES = {
    400: _example("Validation error", "Bad Request", "name: Field required", "VALIDATION_ERROR"),
    401: _example("Unknown demo user", "Unauthorized", "Invalid or missing demo user", "AUTHENTICATION_ERROR"),
    403: _example("Resource owned by another user", "Forbidden",
                  "Access denied: you don't own this property", "FORBIDDEN"),
    404: _example("Resource not found", "Not Found", "Property not found", "NOT_FOUND"),
    500: _example("Store or unexpected failure", "Internal Server Error",
                  "Database operation failed", "DATABASE_ERROR"),
}

QR_ERROR_RESPONSES = {
    **COMMON_ERROR_RESPONSES,
    409: _example("QR code already has the requested status", "Conflict",
                  "QR code is already inactive", "CONFLICT"),
}

CONTENT_ERROR_RESPONSES = {
    400: COMMON_ERROR_RESPONSES[400],
    404: _example("Unknown QR code", "Not Found", "QR code not found", "NOT_FOUND"),
    410: _example("QR code deactivated by its owner", "Gone", "QR code ... is inactive", "GONE"),
}
