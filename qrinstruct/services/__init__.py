"""
Service layer for business logic implementation.
Contains the demo identity, ownership checks, QR encoding and the
property, item, QR code and content services.
"""

from .demo_user import DemoUser, get_demo_user, ensure_demo_user
from .ownership import OwnershipGuard
from .qr_generator import QRGenerator, qr_generator
from .property import PropertyService
from .item import ItemService
from .qr_code import QRCodeService
from .content import ContentService
from .error_handler import ErrorHandlerService

__all__ = [
    "DemoUser",
    "get_demo_user",
    "ensure_demo_user",
    "OwnershipGuard",
    "QRGenerator",
    "qr_generator",
    "PropertyService",
    "ItemService",
    "QRCodeService",
    "ContentService",
    "ErrorHandlerService"
]
