"""
Ownership-chain authorization.
Properties are owned directly; items through their property; QR codes through
item then property. Every check answers 404 for a missing link and 403 for a
foreign owner, before the caller mutates anything.
"""

from typing import Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from qrinstruct.models.property import Property
from qrinstruct.models.item import Item
from qrinstruct.models.qr_code import QRCode
from qrinstruct.repositories.property import PropertyRepository
from qrinstruct.repositories.item import ItemRepository
from qrinstruct.repositories.qr_code import QRCodeRepository
from qrinstruct.utils.exceptions import (
    PropertyNotFoundError,
    ItemNotFoundError,
    QRCodeNotFoundError,
    OwnershipError,
    exception_for_result,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class OwnershipGuard:
    """Loads resources on behalf of a principal and rejects foreign ones."""

    def __init__(self, db_session: AsyncSession):
        self.property_repo = PropertyRepository(db_session)
        self.item_repo = ItemRepository(db_session)
        self.qr_repo = QRCodeRepository(db_session)

    async def owned_property(self, property_id: uuid.UUID, current_user: Any) -> Property:
        """
        Raises:
            PropertyNotFoundError: If the property does not exist
            OwnershipError: If another user owns it
        """
        result = await self.property_repo.get_property_by_id(property_id)
        if not result.success:
            if result.is_not_found:
                raise PropertyNotFoundError(property_id)
            raise exception_for_result(result, "Property")

        property_obj = result.data
        if not current_user.owns(property_obj.user_id):
            logger.warning(f"User {current_user.id} denied access to property {property_id}")
            raise OwnershipError("property")

        return property_obj

    async def owned_item(self, item_id: uuid.UUID, current_user: Any) -> Tuple[Item, Property]:
        """
        Two hops: item, then its property.

        Raises:
            ItemNotFoundError: If the item does not exist
            OwnershipError: If another user owns the parent property
        """
        result = await self.item_repo.get_item_by_id(item_id)
        if not result.success:
            if result.is_not_found:
                raise ItemNotFoundError(item_id)
            raise exception_for_result(result, "Item")

        item = result.data
        parent = await self.property_repo.get_property_by_id(item.property_id)
        if not parent.success:
            if parent.is_not_found:
                raise PropertyNotFoundError(item.property_id)
            raise exception_for_result(parent, "Property")

        if not current_user.owns(parent.data.user_id):
            logger.warning(f"User {current_user.id} denied access to item {item_id}")
            raise OwnershipError("item")

        return item, parent.data

    async def owned_qr_code(self, qr_id: str, current_user: Any) -> QRCode:
        """
        Three hops in one joined read: QR code, item, property. Never records a scan.

        Raises:
            QRCodeNotFoundError: If the QR code does not exist
            OwnershipError: If another user owns the property chain
        """
        result = await self.qr_repo.get_qr_mapping_by_qr_id(qr_id, record_scan=False)
        if not result.success:
            if result.is_not_found:
                raise QRCodeNotFoundError(qr_id)
            raise exception_for_result(result, "QR code")

        qr_code = result.data
        if not current_user.owns(qr_code.item.property.user_id):
            logger.warning(f"User {current_user.id} denied access to QR code {qr_id}")
            raise OwnershipError("QR code")

        return qr_code
