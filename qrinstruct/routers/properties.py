"""
Property management API endpoints.
"""

from fastapi import APIRouter, Depends, status, Path
from typing import Any, Dict
from uuid import UUID

from qrinstruct.services.demo_user import DemoUser
from qrinstruct.services.property import PropertyService
from qrinstruct.schemas.common import success_response
from qrinstruct.schemas.property import PropertyCreate, PropertyUpdate
from qrinstruct.schemas.error import COMMON_ERROR_RESPONSES
from qrinstruct.utils.dependencies import get_current_user, get_property_service


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    responses=COMMON_ERROR_RESPONSES
)
async def create_property(
    property_data: PropertyCreate,
    current_user: DemoUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Create a property owned by the current user. `property_type` defaults to `other`."""
    property_obj = await property_service.create_property(property_data, current_user)
    return success_response(property_obj.to_dict(), "Property created successfully")


@router.get(
    "",
    summary="List my properties",
    responses=COMMON_ERROR_RESPONSES
)
async def list_properties(
    current_user: DemoUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """All properties of the current user, newest first, with item counts."""
    properties = await property_service.list_properties(current_user)
    return success_response(
        {
            "properties": [p.to_dict() for p in properties],
            "count": len(properties),
        },
        f"Found {len(properties)} properties"
    )


@router.get(
    "/stats",
    summary="Property statistics",
    responses=COMMON_ERROR_RESPONSES
)
async def get_property_statistics(
    current_user: DemoUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    stats = await property_service.get_property_statistics(current_user)
    return success_response(stats, "Property statistics retrieved successfully")


@router.get(
    "/{property_id}",
    summary="Get property",
    responses=COMMON_ERROR_RESPONSES
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: DemoUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Property with nested item summaries."""
    property_obj = await property_service.get_property(property_id, current_user)
    return success_response(property_obj.to_dict(include_items=True))


@router.put(
    "/{property_id}",
    summary="Update property",
    responses=COMMON_ERROR_RESPONSES
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: DemoUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Partial update; fields not sent are left unchanged."""
    property_obj = await property_service.update_property(property_id, property_data, current_user)
    return success_response(property_obj.to_dict(), "Property updated successfully")


@router.delete(
    "/{property_id}",
    summary="Delete property",
    responses=COMMON_ERROR_RESPONSES
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: DemoUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Dict[str, Any]:
    """Delete a property together with its items and QR codes."""
    receipt = await property_service.delete_property(property_id, current_user)
    return success_response(receipt, "Property deleted successfully")
