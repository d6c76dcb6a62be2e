"""
Pydantic schemas for item requests.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any
from qrinstruct.models.item import MediaType
import uuid


class ItemCreate(BaseModel):
    """Schema for creating an item inside a property."""

    model_config = ConfigDict(populate_by_name=True)

    property_id: uuid.UUID = Field(
        ...,
        alias="propertyId",
        description="Parent property"
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        examples=["Coffee Maker"]
    )

    description: Optional[str] = Field(None, max_length=5000)

    location: Optional[str] = Field(
        None,
        max_length=255,
        description="Room or placement inside the property",
        examples=["Kitchen counter"]
    )

    media_url: Optional[str] = Field(None, max_length=1000)

    media_type: MediaType = Field(
        MediaType.TEXT,
        description="Kind of instructional media"
    )

    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Open key-value map such as difficulty, duration, category"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    def fields(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"property_id"})
        data["media_type"] = MediaType(data["media_type"]).value
        return data


class ItemUpdate(BaseModel):
    """Partial item update; only fields present in the request body are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    media_url: Optional[str] = Field(None, max_length=1000)
    media_type: Optional[MediaType] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip() if v else v

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        if data.get("media_type") is not None:
            data["media_type"] = MediaType(data["media_type"]).value
        return data


class ItemLocationUpdate(BaseModel):
    """Moves an item; null or blank clears the location."""

    location: Optional[str] = Field(..., max_length=255, examples=["Living room shelf"])
