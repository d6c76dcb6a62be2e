"""
Item service: items live inside properties and inherit their ownership.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from qrinstruct.repositories.item import ItemRepository
from qrinstruct.models.item import Item
from qrinstruct.schemas.item import ItemCreate, ItemUpdate
from qrinstruct.services.ownership import OwnershipGuard
from qrinstruct.utils.exceptions import ValidationError, exception_for_result
import uuid
import logging

logger = logging.getLogger(__name__)


class ItemService:
    """
    Item operations behind a two-hop ownership check (item, then property).
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.item_repo = ItemRepository(db_session)
        self.guard = OwnershipGuard(db_session)

    async def create_item(self, item_data: ItemCreate, current_user: Any) -> Dict[str, Any]:
        """
        Create an item in a property the current user owns.

        Returns:
            `{"item": Item, "property_info": {...}}`
        """
        await self.guard.owned_property(item_data.property_id, current_user)

        result = await self.item_repo.create_item(item_data.property_id, item_data.fields())
        if not result.success:
            raise exception_for_result(result, "Item")

        logger.info(f"Item created by user {current_user.id}: {result.data.name} (ID: {result.data.id})")
        return {"item": result.data, "property_info": result.extra["property_info"]}

    async def list_items(self, property_id: uuid.UUID, current_user: Any) -> Dict[str, Any]:
        """Items of an owned property, newest first, with the property name."""
        property_obj = await self.guard.owned_property(property_id, current_user)

        result = await self.item_repo.get_items_by_property_id(property_id)
        if not result.success:
            raise exception_for_result(result, "Item")

        items: List[Item] = result.data
        return {
            "items": items,
            "count": len(items),
            "property_id": str(property_obj.id),
            "property_name": property_obj.name,
        }

    async def get_item(self, item_id: uuid.UUID, current_user: Any) -> Dict[str, Any]:
        item, property_obj = await self.guard.owned_item(item_id, current_user)
        return {"item": item, "property_name": property_obj.name}

    async def update_item(self, item_id: uuid.UUID, item_data: ItemUpdate, current_user: Any) -> Item:
        """
        Raises:
            ItemNotFoundError: If the item doesn't exist
            OwnershipError: If the current user doesn't own its property
            ValidationError: If no updatable field was sent
        """
        await self.guard.owned_item(item_id, current_user)

        update_data = item_data.changes()
        if not update_data:
            raise ValidationError("No valid fields provided for update")

        result = await self.item_repo.update_item(item_id, update_data)
        if not result.success:
            raise exception_for_result(result, "Item")

        logger.info(f"Item updated by user {current_user.id}: {item_id}")
        return result.data

    async def update_item_location(
        self,
        item_id: uuid.UUID,
        location: Optional[str],
        current_user: Any
    ) -> Dict[str, Any]:
        """Move an item, reporting the old and new location."""
        await self.guard.owned_item(item_id, current_user)

        result = await self.item_repo.update_item_location(item_id, location)
        if not result.success:
            raise exception_for_result(result, "Item")

        return {
            "item": result.data,
            "previous_location": result.extra["previous_location"],
            "new_location": result.extra["new_location"],
        }

    async def delete_item(self, item_id: uuid.UUID, current_user: Any) -> Dict[str, Any]:
        """Delete an owned item; its QR codes are removed by the store cascade."""
        await self.guard.owned_item(item_id, current_user)

        result = await self.item_repo.delete_item(item_id)
        if not result.success:
            raise exception_for_result(result, "Item")

        deleted = result.data
        logger.info(f"Item deleted by user {current_user.id}: {item_id}")
        return {
            "deleted_item": {
                "id": str(deleted.id),
                "name": deleted.name,
                "location": deleted.location,
                "property_id": str(deleted.property_id),
            },
            "cascade_info": result.extra["cascade_info"],
        }
