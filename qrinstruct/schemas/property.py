"""
Pydantic schemas for property requests.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from qrinstruct.models.property import PropertyType


class PropertyCreate(BaseModel):
    """Schema for creating a new property."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property display name",
        examples=["Sunset Apt"]
    )

    description: Optional[str] = Field(
        None,
        max_length=5000,
        description="Free-text description for guests"
    )

    address: Optional[str] = Field(
        None,
        max_length=500,
        description="Street address",
        examples=["12 Ocean Drive, Miami"]
    )

    property_type: PropertyType = Field(
        PropertyType.OTHER,
        description="Kind of rental unit",
        examples=["apartment"]
    )

    settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Open key-value settings"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate and clean name."""
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class PropertyUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    address: Optional[str] = Field(None, max_length=500)
    property_type: Optional[PropertyType] = None
    settings: Optional[Dict[str, Any]] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip() if v else v

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, with enums reduced to their values."""
        data = self.model_dump(exclude_unset=True)
        if data.get("property_type") is not None:
            data["property_type"] = PropertyType(data["property_type"]).value
        return data
