"""
Item repository (data-access layer for the items table).
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, func
from qrinstruct.repositories.base import BaseRepository, DAOResult
from qrinstruct.models.item import Item, MediaType
from qrinstruct.models.property import Property
from qrinstruct.models.qr_code import QRCode
from qrinstruct.database import utcnow
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("name", "description", "location", "media_url", "media_type", "metadata")


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _media_type(value: Any) -> MediaType:
    if value is None or value == "":
        return MediaType.TEXT
    return MediaType(value)


class ItemRepository(BaseRepository[Item]):
    """Repository for items placed in properties."""

    def __init__(self, db: AsyncSession):
        super().__init__(Item, db)

    async def create_item(self, property_id: uuid.UUID, item_data: Dict[str, Any]) -> DAOResult[Item]:
        """
        Create an item inside an existing property.

        Returns:
            Result holding the item; `extra["property_info"]` names the parent
        """
        if not property_id:
            return DAOResult.invalid("Property ID is required")

        name = _clean_optional((item_data or {}).get("name"))
        if not name:
            return DAOResult.invalid("Item name is required")

        try:
            media_type = _media_type(item_data.get("media_type"))
        except ValueError:
            return DAOResult.invalid(f"Media type must be one of: {', '.join(MediaType.values())}")

        try:
            parent = (
                await self.db.execute(
                    select(Property.id, Property.name).where(Property.id == property_id)
                )
            ).one_or_none()
        except SQLAlchemyError as e:
            return await self._fail("validate property for", e)

        if parent is None:
            return DAOResult.not_found("Property", property_id)

        result = await self.create({
            "property_id": property_id,
            "name": name,
            "description": _clean_optional(item_data.get("description")),
            "location": _clean_optional(item_data.get("location")),
            "media_url": _clean_optional(item_data.get("media_url")),
            "media_type": media_type,
            "item_metadata": item_data.get("metadata") or {},
        })
        if not result.success:
            return result

        logger.info(f"Created item: {name} in property {parent.name} (ID: {result.data.id})")
        return DAOResult.ok(
            result.data,
            property_info={"property_id": str(parent.id), "property_name": parent.name},
        )

    async def get_items_by_property_id(self, property_id: uuid.UUID) -> DAOResult[List[Item]]:
        """Items of a property, newest first."""
        if not property_id:
            return DAOResult.invalid("Property ID is required")
        return await self.get_multi(filters={"property_id": property_id}, order_by="-created_at")

    async def get_item_by_id(self, item_id: uuid.UUID) -> DAOResult[Item]:
        if not item_id:
            return DAOResult.invalid("Item ID is required")
        return await self.get_by_id(item_id)

    async def update_item(self, item_id: uuid.UUID, updates: Dict[str, Any]) -> DAOResult[Item]:
        """Update whitelisted item fields and stamp updated_at."""
        if not updates:
            return DAOResult.invalid("Update data is required")

        update_data: Dict[str, Any] = {}
        for field_name in MUTABLE_FIELDS:
            if field_name not in updates:
                continue
            value = updates[field_name]

            if field_name == "name":
                value = _clean_optional(value)
                if not value:
                    return DAOResult.invalid("Item name must be a non-empty string")
                update_data["name"] = value
            elif field_name == "media_type":
                try:
                    update_data["media_type"] = _media_type(value)
                except ValueError:
                    return DAOResult.invalid(
                        f"Media type must be one of: {', '.join(MediaType.values())}"
                    )
            elif field_name == "metadata":
                update_data["item_metadata"] = value or {}
            else:
                update_data[field_name] = _clean_optional(value)

        if not update_data:
            return DAOResult.invalid("No updatable fields provided")

        update_data["updated_at"] = utcnow()
        return await self.update(item_id, update_data)

    async def update_item_location(self, item_id: uuid.UUID, location: Optional[str]) -> DAOResult[Item]:
        """
        Change only the location of an item.

        Returns:
            Result holding the item; `extra` carries previous_location and new_location
        """
        existing = await self.get_item_by_id(item_id)
        if not existing.success:
            return existing

        previous_location = existing.data.location
        new_location = _clean_optional(location)

        result = await self.update(item_id, {"location": new_location, "updated_at": utcnow()})
        if not result.success:
            return result

        logger.info(f"Item {item_id} moved from {previous_location!r} to {new_location!r}")
        return DAOResult.ok(
            result.data,
            previous_location=previous_location,
            new_location=new_location,
        )

    async def delete_item(self, item_id: uuid.UUID) -> DAOResult[Item]:
        """
        Delete an item; its QR codes go with it through the store cascade.

        Returns:
            Result holding the deleted item snapshot and `extra["cascade_info"]`
        """
        existing = await self.get_item_by_id(item_id)
        if not existing.success:
            return existing

        try:
            qr_count = (
                await self.db.execute(select(func.count(QRCode.id)).where(QRCode.item_id == item_id))
            ).scalar() or 0
        except SQLAlchemyError as e:
            return await self._fail("count QR codes for", e)

        deleted = await self.delete(item_id)
        if not deleted.success:
            return deleted

        logger.info(f"Deleted item {item_id} ({qr_count} QR codes cascaded)")
        return DAOResult.ok(
            existing.data,
            cascade_info={
                "qr_codes_affected": qr_count,
                "note": "Associated QR codes deleted via CASCADE constraints",
            },
        )
