"""
Repository layer for data access operations.
Store errors are caught here and reported as DAOResult values.
"""

from qrinstruct.repositories.base import BaseRepository, DAOResult, ResultCode
from qrinstruct.repositories.user import UserRepository
from qrinstruct.repositories.property import PropertyRepository
from qrinstruct.repositories.item import ItemRepository
from qrinstruct.repositories.qr_code import QRCodeRepository

__all__ = [
    "BaseRepository",
    "DAOResult",
    "ResultCode",
    "UserRepository",
    "PropertyRepository",
    "ItemRepository",
    "QRCodeRepository",
]
