"""
Property model for managed rental units.
A property belongs to one user and owns its items; deleting it cascades to
items and, transitively, their QR codes at the store level.
"""

from sqlalchemy import String, Text, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship
from qrinstruct.database import Base
import enum
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from qrinstruct.models.user import User
    from qrinstruct.models.item import Item


class PropertyType(str, enum.Enum):
    """Kind of rental unit."""
    APARTMENT = "apartment"
    HOUSE = "house"
    CONDO = "condo"
    STUDIO = "studio"
    OTHER = "other"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class Property(Base):
    """
    Property model for rental units registered by a property manager.
    Carries free-form settings and the list of items placed in the unit.
    """

    __tablename__ = "properties"

    # Owner is fixed at creation time
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this property"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Property display name"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    address: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True
    )

    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(
            PropertyType,
            name="property_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls]
        ),
        nullable=False,
        default=PropertyType.OTHER,
        comment="Kind of rental unit"
    )

    settings: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Open key-value settings"
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="properties",
        lazy="raise_on_sql"
    )

    items: Mapped[List["Item"]] = relationship(
        "Item",
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Item.created_at.desc()"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, name={self.name[:30]}, user_id={self.user_id})>"

    @property
    def items_loaded(self) -> bool:
        """Whether the items collection is already loaded (never triggers IO)."""
        return "items" not in inspect(self).unloaded

    @property
    def item_count(self) -> int:
        """Number of items placed in this property."""
        return len(self.items) if self.items_loaded else 0

    @property
    def has_items(self) -> bool:
        return self.item_count > 0

    def to_dict(self, include_items: bool = False) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_items: Whether to include nested item summaries

        Returns:
            Dictionary representation of property with item_count/has_items
        """
        result = {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "name": self.name,
            "description": self.description,
            "address": self.address,
            "property_type": self.property_type.value,
            "settings": self.settings or {},
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "item_count": self.item_count,
            "has_items": self.has_items,
        }

        if include_items:
            result["items"] = [item.to_summary() for item in self.items] if self.items_loaded else []

        return result


# Owner listing is always newest first
owner_created_index = Index(
    "idx_properties_user_created",
    Property.user_id,
    Property.created_at.desc()
)
