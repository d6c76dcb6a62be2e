"""
Item management API endpoints.
"""

from fastapi import APIRouter, Depends, status, Path, Query
from typing import Any, Dict
from uuid import UUID

from qrinstruct.services.demo_user import DemoUser
from qrinstruct.services.item import ItemService
from qrinstruct.schemas.common import success_response
from qrinstruct.schemas.item import ItemCreate, ItemUpdate, ItemLocationUpdate
from qrinstruct.schemas.error import COMMON_ERROR_RESPONSES
from qrinstruct.utils.dependencies import get_current_user, get_item_service


router = APIRouter(prefix="/items", tags=["Items"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create item",
    responses=COMMON_ERROR_RESPONSES
)
async def create_item(
    item_data: ItemCreate,
    current_user: DemoUser = Depends(get_current_user),
    item_service: ItemService = Depends(get_item_service)
) -> Dict[str, Any]:
    """Create an item inside one of the current user's properties. `media_type` defaults to `text`."""
    created = await item_service.create_item(item_data, current_user)
    data = created["item"].to_dict()
    data["property_info"] = created["property_info"]
    return success_response(data, "Item created successfully")


@router.get(
    "",
    summary="List items of a property",
    responses=COMMON_ERROR_RESPONSES
)
async def list_items(
    property_id: UUID = Query(..., alias="propertyId", description="Property whose items to list"),
    current_user: DemoUser = Depends(get_current_user),
    item_service: ItemService = Depends(get_item_service)
) -> Dict[str, Any]:
    listing = await item_service.list_items(property_id, current_user)
    return success_response(
        {
            "items": [item.to_dict() for item in listing["items"]],
            "count": listing["count"],
            "property_id": listing["property_id"],
            "property_name": listing["property_name"],
        },
        f"Found {listing['count']} items"
    )


@router.get(
    "/{item_id}",
    summary="Get item",
    responses=COMMON_ERROR_RESPONSES
)
async def get_item(
    item_id: UUID = Path(..., description="Item ID"),
    current_user: DemoUser = Depends(get_current_user),
    item_service: ItemService = Depends(get_item_service)
) -> Dict[str, Any]:
    found = await item_service.get_item(item_id, current_user)
    data = found["item"].to_dict()
    data["property_name"] = found["property_name"]
    return success_response(data)


@router.put(
    "/{item_id}",
    summary="Update item",
    responses=COMMON_ERROR_RESPONSES
)
async def update_item(
    item_data: ItemUpdate,
    item_id: UUID = Path(..., description="Item ID"),
    current_user: DemoUser = Depends(get_current_user),
    item_service: ItemService = Depends(get_item_service)
) -> Dict[str, Any]:
    item = await item_service.update_item(item_id, item_data, current_user)
    return success_response(item.to_dict(), "Item updated successfully")


@router.put(
    "/{item_id}/location",
    summary="Move item",
    responses=COMMON_ERROR_RESPONSES
)
async def update_item_location(
    location_data: ItemLocationUpdate,
    item_id: UUID = Path(..., description="Item ID"),
    current_user: DemoUser = Depends(get_current_user),
    item_service: ItemService = Depends(get_item_service)
) -> Dict[str, Any]:
    """Change only the location, reporting previous and new values."""
    moved = await item_service.update_item_location(item_id, location_data.location, current_user)
    return success_response(
        {
            "item": moved["item"].to_dict(),
            "previous_location": moved["previous_location"],
            "new_location": moved["new_location"],
        },
        "Item location updated successfully"
    )


@router.delete(
    "/{item_id}",
    summary="Delete item",
    responses=COMMON_ERROR_RESPONSES
)
async def delete_item(
    item_id: UUID = Path(..., description="Item ID"),
    current_user: DemoUser = Depends(get_current_user),
    item_service: ItemService = Depends(get_item_service)
) -> Dict[str, Any]:
    """Delete an item together with its QR codes."""
    receipt = await item_service.delete_item(item_id, current_user)
    return success_response(receipt, "Item deleted successfully")
