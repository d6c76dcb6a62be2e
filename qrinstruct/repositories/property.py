"""
Property repository (data-access layer for the properties table).
Adds owner-scoped listing, item-count aggregates and cascade reporting.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, func, distinct
from qrinstruct.repositories.base import BaseRepository, DAOResult
from qrinstruct.models.property import Property, PropertyType
from qrinstruct.models.item import Item
from qrinstruct.models.qr_code import QRCode
from qrinstruct.database import utcnow
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)

# Fields an owner may change after creation; user_id is immutable
MUTABLE_FIELDS = ("name", "description", "address", "property_type", "settings")


def _clean_text(value: Optional[str]) -> Optional[str]:
    """Trim strings and store blanks as NULL."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class PropertyRepository(BaseRepository[Property]):
    """Repository for properties owned by users."""

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, user_id: uuid.UUID, property_data: Dict[str, Any]) -> DAOResult[Property]:
        """
        Create a new property for a user.

        Args:
            user_id: Owner of the new property
            property_data: name (required), description, address, property_type, settings

        Returns:
            Result holding the created property
        """
        name = _clean_text(property_data.get("name"))
        if not user_id or not name:
            return DAOResult.invalid("User ID and property name are required")

        property_type = property_data.get("property_type") or PropertyType.OTHER
        try:
            property_type = PropertyType(property_type)
        except ValueError:
            return DAOResult.invalid(
                f"Property type must be one of: {', '.join(PropertyType.values())}"
            )

        result = await self.create({
            "user_id": user_id,
            "name": name,
            "description": _clean_text(property_data.get("description")),
            "address": _clean_text(property_data.get("address")),
            "property_type": property_type,
            "settings": property_data.get("settings") or {},
        })
        if result.success:
            logger.info(f"Created property: {name} (ID: {result.data.id})")
        return result

    async def get_properties_by_user_id(self, user_id: uuid.UUID) -> DAOResult[List[Property]]:
        """All properties owned by a user, newest first, with items eagerly loaded."""
        if not user_id:
            return DAOResult.invalid("User ID is required")
        return await self.get_multi(filters={"user_id": user_id}, order_by="-created_at")

    async def get_property_by_id(self, property_id: uuid.UUID) -> DAOResult[Property]:
        """Property with its item summaries loaded."""
        if not property_id:
            return DAOResult.invalid("Property ID is required")
        return await self.get_by_id(property_id)

    async def update_property(self, property_id: uuid.UUID, updates: Dict[str, Any]) -> DAOResult[Property]:
        """
        Update whitelisted property fields and stamp updated_at.

        Args:
            property_id: Property to update
            updates: Partial field map; unknown keys are ignored

        Returns:
            Result holding the updated property
        """
        update_data: Dict[str, Any] = {}

        for field_name in MUTABLE_FIELDS:
            if field_name not in updates:
                continue
            value = updates[field_name]

            if field_name == "name":
                value = _clean_text(value)
                if not value:
                    return DAOResult.invalid("Property name must be a non-empty string")
            elif field_name in ("description", "address"):
                value = _clean_text(value)
            elif field_name == "property_type":
                try:
                    value = PropertyType(value)
                except ValueError:
                    return DAOResult.invalid(
                        f"Property type must be one of: {', '.join(PropertyType.values())}"
                    )
            elif field_name == "settings":
                value = value or {}

            update_data[field_name] = value

        if not update_data:
            return DAOResult.invalid("No updatable fields provided")

        update_data["updated_at"] = utcnow()
        return await self.update(property_id, update_data)

    async def delete_property(self, property_id: uuid.UUID) -> DAOResult[Property]:
        """
        Delete a property. Items and QR codes are removed by the store's cascade rules.

        Returns:
            Result holding the deleted property snapshot; `extra["cascade_info"]`
            reports how many items the cascade removed
        """
        existing = await self.get_property_by_id(property_id)
        if not existing.success:
            return existing

        property_obj = existing.data
        items_affected = property_obj.item_count

        deleted = await self.delete(property_id)
        if not deleted.success:
            return deleted

        logger.info(f"Deleted property {property_id} ({items_affected} items cascaded)")
        return DAOResult.ok(
            property_obj,
            cascade_info={
                "items_affected": items_affected,
                "note": "Associated items and QR codes deleted via CASCADE constraints",
            },
        )

    async def get_property_statistics(self, user_id: uuid.UUID) -> DAOResult[Dict[str, int]]:
        """Totals across all properties owned by a user."""
        try:
            query = (
                select(
                    func.count(distinct(Property.id)),
                    func.count(distinct(Item.id)),
                    func.count(distinct(QRCode.id)),
                    func.count(distinct(Item.property_id)),
                )
                .select_from(Property)
                .outerjoin(Item, Item.property_id == Property.id)
                .outerjoin(QRCode, QRCode.item_id == Item.id)
                .where(Property.user_id == user_id)
            )
            row = (await self.db.execute(query)).one()
        except SQLAlchemyError as e:
            return await self._fail("aggregate", e)

        total_properties, total_items, total_qr_codes, properties_with_items = row
        return DAOResult.ok({
            "total_properties": total_properties or 0,
            "total_items": total_items or 0,
            "total_qr_codes": total_qr_codes or 0,
            "properties_with_items": properties_with_items or 0,
        })
