"""
API route handlers for the QR Instruct API.
"""

from .properties import router as properties_router
from .items import router as items_router
from .qrcodes import router as qrcodes_router
from .content import router as content_router

__all__ = ["properties_router", "items_router", "qrcodes_router", "content_router"]
