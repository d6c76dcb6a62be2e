"""
Pydantic schemas for QR code requests.
Accepts both snake_case and the camelCase names used by the dashboard client.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Literal
from qrinstruct.models.qr_code import QRStatus
import uuid

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


class QROptions(BaseModel):
    """Encoder options for a generated QR image."""

    model_config = ConfigDict(populate_by_name=True)

    width: Optional[int] = Field(None, ge=128, le=1024, description="Image width in pixels")
    margin: Optional[int] = Field(None, ge=0, le=5, description="Quiet zone in modules")
    error_correction_level: Optional[Literal["L", "M", "Q", "H"]] = Field(
        None,
        alias="errorCorrectionLevel"
    )
    dark_color: Optional[str] = Field(None, alias="darkColor", pattern=HEX_COLOR)
    light_color: Optional[str] = Field(None, alias="lightColor", pattern=HEX_COLOR)

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class QRCodeGenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: uuid.UUID = Field(..., alias="itemId")
    options: Optional[QROptions] = None


class QRBatchRequest(BaseModel):
    """Batch generation; the item limit is enforced by the service."""

    model_config = ConfigDict(populate_by_name=True)

    item_ids: List[uuid.UUID] = Field(..., alias="itemIds", min_length=1)
    options: Optional[QROptions] = None


class QRStatusUpdate(BaseModel):
    status: QRStatus = Field(..., examples=["inactive"])
