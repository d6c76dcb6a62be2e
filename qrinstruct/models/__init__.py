"""
Database models for the QR Instruct API.
Includes User, Property, Item and QRCode models with their ownership chain.
"""

from qrinstruct.models.user import User
from qrinstruct.models.property import Property, PropertyType
from qrinstruct.models.item import Item, MediaType
from qrinstruct.models.qr_code import QRCode, QRStatus

# Export all models for easy importing
__all__ = [
    "User",
    "Property",
    "PropertyType",
    "Item",
    "MediaType",
    "QRCode",
    "QRStatus",
]
