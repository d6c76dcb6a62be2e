"""
QR code model mapping a public opaque token to an item.
"""

from sqlalchemy import String, Integer, DateTime, JSON, Enum as SQLEnum, ForeignKey, Uuid, CheckConstraint, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship
from qrinstruct.database import Base
from datetime import datetime
import enum
import uuid
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from qrinstruct.models.item import Item


class QRStatus(str, enum.Enum):
    """QR codes toggle between these two states; there is no expiry."""
    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class QRCode(Base):
    """
    QR code issued for an item.
    `qr_id` is the externally visible token embedded in the content URL and is
    distinct from the internal primary key.
    """

    __tablename__ = "qr_codes"
    __table_args__ = (
        CheckConstraint("scan_count >= 0", name="ck_qr_codes_scan_count_non_negative"),
    )

    item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    qr_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
        comment="Public token embedded in the content URL"
    )

    status: Mapped[QRStatus] = mapped_column(
        SQLEnum(
            QRStatus,
            name="qr_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls]
        ),
        nullable=False,
        default=QRStatus.ACTIVE,
        index=True
    )

    scan_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0
    )

    last_scanned: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    generation_options: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Content URL and encoder options used at generation time"
    )

    item: Mapped["Item"] = relationship(
        "Item",
        back_populates="qr_codes",
        lazy="raise_on_sql"
    )

    def __repr__(self) -> str:
        return f"<QRCode(qr_id={self.qr_id}, status={self.status.value}, scans={self.scan_count})>"

    @property
    def is_active(self) -> bool:
        return self.status == QRStatus.ACTIVE

    @property
    def item_loaded(self) -> bool:
        return "item" not in inspect(self).unloaded

    def to_dict(self, include_item: bool = False) -> dict:
        result = {
            "id": str(self.id),
            "qr_id": self.qr_id,
            "item_id": str(self.item_id),
            "status": self.status.value,
            "scan_count": self.scan_count or 0,
            "last_scanned": self.last_scanned.isoformat() if self.last_scanned else None,
            "content_url": (self.generation_options or {}).get("content_url"),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_item and self.item_loaded and self.item is not None:
            result["item"] = {
                "id": str(self.item.id),
                "name": self.item.name,
                "location": self.item.location,
                "property_id": str(self.item.property_id),
            }

        return result
