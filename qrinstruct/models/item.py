"""
Item model: a physical object or instruction set located within a property.
"""

from sqlalchemy import String, Text, JSON, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from qrinstruct.database import Base
import enum
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from qrinstruct.models.property import Property
    from qrinstruct.models.qr_code import QRCode


class MediaType(str, enum.Enum):
    """Kind of instructional media attached to an item."""
    YOUTUBE = "youtube"
    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"
    OTHER = "other"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class Item(Base):
    """
    Item placed in a property (appliance, fixture, instruction set).
    Guests reach an item's content through one of its QR codes.
    """

    __tablename__ = "items"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Parent property, immutable after creation"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    location: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Free-text room or placement inside the property"
    )

    media_url: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True
    )

    media_type: Mapped[MediaType] = mapped_column(
        SQLEnum(
            MediaType,
            name="media_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls]
        ),
        nullable=False,
        default=MediaType.TEXT
    )

    # "metadata" is reserved on declarative classes
    item_metadata: Mapped[Dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
        comment="Open key-value map, e.g. difficulty/duration/category"
    )

    # Declared before the "property" relationship, which shadows the builtin in this class body
    @property
    def category(self) -> Optional[str]:
        return (self.item_metadata or {}).get("category")

    property: Mapped["Property"] = relationship(
        "Property",
        back_populates="items",
        lazy="raise_on_sql"
    )

    qr_codes: Mapped[List["QRCode"]] = relationship(
        "QRCode",
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name[:30]}, property_id={self.property_id})>"

    def to_summary(self) -> dict:
        """Short form used when nesting items under a property."""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "media_url": self.media_url,
            "media_type": self.media_type.value,
            "created_at": self.created_at.isoformat(),
        }

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "media_url": self.media_url,
            "media_type": self.media_type.value,
            "metadata": self.item_metadata or {},
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
