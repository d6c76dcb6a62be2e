"""
Property service: owner-scoped CRUD with ownership validation.
"""

from typing import Any, Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
from qrinstruct.repositories.property import PropertyRepository
from qrinstruct.models.property import Property
from qrinstruct.schemas.property import PropertyCreate, PropertyUpdate
from qrinstruct.services.ownership import OwnershipGuard
from qrinstruct.utils.exceptions import ValidationError, exception_for_result
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for managing properties owned by the current user.
    Every operation except create and list loads the property and checks
    ownership before touching it.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.guard = OwnershipGuard(db_session)

    async def create_property(self, property_data: PropertyCreate, current_user: Any) -> Property:
        """
        Create a property owned by the current user.

        Raises:
            ValidationError: If the repository rejects the data
            DatabaseError: If the store operation fails
        """
        result = await self.property_repo.create_property(current_user.id, property_data.model_dump())
        if not result.success:
            raise exception_for_result(result, "Property")

        logger.info(f"Property created by user {current_user.id}: {result.data.name} (ID: {result.data.id})")
        return result.data

    async def list_properties(self, current_user: Any) -> List[Property]:
        """All properties of the current user, newest first."""
        result = await self.property_repo.get_properties_by_user_id(current_user.id)
        if not result.success:
            raise exception_for_result(result, "Property")
        return result.data

    async def get_property(self, property_id: uuid.UUID, current_user: Any) -> Property:
        """
        Get a property with its item summaries.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            OwnershipError: If the current user doesn't own it
        """
        return await self.guard.owned_property(property_id, current_user)

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate,
        current_user: Any
    ) -> Property:
        """
        Apply a partial update to an owned property.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            OwnershipError: If the current user doesn't own it
            ValidationError: If no updatable field was sent
        """
        await self.guard.owned_property(property_id, current_user)

        update_data = property_data.changes()
        if not update_data:
            raise ValidationError("No valid fields provided for update")

        result = await self.property_repo.update_property(property_id, update_data)
        if not result.success:
            raise exception_for_result(result, "Property")

        logger.info(f"Property updated by user {current_user.id}: {property_id}")
        return result.data

    async def delete_property(self, property_id: uuid.UUID, current_user: Any) -> Dict[str, Any]:
        """
        Delete an owned property; its items and QR codes go with it.

        Returns:
            Receipt with the deleted property and cascade information
        """
        await self.guard.owned_property(property_id, current_user)

        result = await self.property_repo.delete_property(property_id)
        if not result.success:
            raise exception_for_result(result, "Property")

        deleted = result.data
        logger.info(f"Property deleted by user {current_user.id}: {property_id}")
        return {
            "deleted_property": {"id": str(deleted.id), "name": deleted.name},
            "cascade_info": result.extra["cascade_info"],
        }

    async def get_property_statistics(self, current_user: Any) -> Dict[str, int]:
        result = await self.property_repo.get_property_statistics(current_user.id)
        if not result.success:
            raise exception_for_result(result, "Property")
        return result.data
