"""
Pydantic schemas for request/response validation.
"""

from .common import APIResponse, success_response
from .error import ErrorDetail, ErrorResponse, COMMON_ERROR_RESPONSES

from .property import PropertyCreate, PropertyUpdate
from .item import ItemCreate, ItemUpdate, ItemLocationUpdate
from .qr_code import QROptions, QRCodeGenerateRequest, QRBatchRequest, QRStatusUpdate
from .content import ContentViewRequest

__all__ = [
    "APIResponse",
    "success_response",
    "ErrorDetail",
    "ErrorResponse",
    "COMMON_ERROR_RESPONSES",

    "PropertyCreate",
    "PropertyUpdate",

    "ItemCreate",
    "ItemUpdate",
    "ItemLocationUpdate",

    "QROptions",
    "QRCodeGenerateRequest",
    "QRBatchRequest",
    "QRStatusUpdate",

    "ContentViewRequest",
]
