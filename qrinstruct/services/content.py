"""
Content resolver: the public read path behind a scanned QR code.
Resolving content is the only operation that counts a scan.
"""

from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from qrinstruct.repositories.qr_code import QRCodeRepository
from qrinstruct.models.qr_code import QRCode
from qrinstruct.models.item import Item
from qrinstruct.models.property import Property
from qrinstruct.services.ownership import OwnershipGuard
from qrinstruct.services.qr_generator import QRGenerator, qr_generator
from qrinstruct.database import utcnow
from qrinstruct.utils.exceptions import (
    ValidationError,
    NotFoundError,
    QRCodeNotFoundError,
    QRCodeInactiveError,
    exception_for_result,
)
import logging

logger = logging.getLogger(__name__)


def _keywords(item: Item, property_obj: Property) -> list:
    return [k for k in (item.name, property_obj.name, item.location, item.category) if k]


class ContentService:
    """Maps a public qr_id to the item and property it describes."""

    def __init__(self, db_session: AsyncSession, generator: Optional[QRGenerator] = None):
        self.db = db_session
        self.qr_repo = QRCodeRepository(db_session)
        self.guard = OwnershipGuard(db_session)
        self.generator = generator or qr_generator

    @staticmethod
    def _require_code(qr_code: Optional[str]) -> str:
        if not qr_code or not qr_code.strip():
            raise ValidationError("QR code parameter is required")
        return qr_code.strip()

    async def _load(self, qr_code: str, record_scan: bool = False) -> QRCode:
        result = await self.qr_repo.get_qr_mapping_by_qr_id(qr_code, record_scan=record_scan)
        if not result.success:
            if result.is_not_found:
                raise QRCodeNotFoundError(qr_code)
            raise exception_for_result(result, "QR code")
        return result.data

    async def _load_active(self, qr_code: str) -> QRCode:
        """Unknown and inactive codes both read as not found."""
        mapping = await self._load(qr_code)
        if not mapping.is_active:
            raise NotFoundError("QR code", detail="QR code not found or inactive")
        return mapping

    async def get_content_by_qr_code(self, qr_code: str) -> Dict[str, Any]:
        """
        Resolve a scanned code to its display payload and count the scan.

        Raises:
            ValidationError: If the code is blank
            QRCodeNotFoundError: If the code is unknown
            QRCodeInactiveError: If the owner deactivated the code (no scan is counted)
        """
        qr_code = self._require_code(qr_code)
        mapping = await self._load(qr_code, record_scan=True)

        if not mapping.is_active:
            logger.info(f"Inactive QR code requested: {qr_code}")
            raise QRCodeInactiveError(qr_code)

        item = mapping.item
        property_obj = item.property
        logger.info(f"QR code {qr_code} resolved (scan #{mapping.scan_count})")

        return {
            "qr_code": qr_code,
            "scan_count": mapping.scan_count,
            "item": {
                "id": str(item.id),
                "name": item.name,
                "description": item.description,
                "location": item.location,
                "media_url": item.media_url,
                "media_type": item.media_type.value,
                "metadata": item.item_metadata or {},
            },
            "property": {
                "id": str(property_obj.id),
                "name": property_obj.name,
                "description": property_obj.description,
                "address": property_obj.address,
                "property_type": property_obj.property_type.value,
                "settings": property_obj.settings or {},
            },
            "content_meta": {
                "title": f"{item.name} - {property_obj.name}",
                "description": item.description,
                "keywords": _keywords(item, property_obj),
                "canonical_url": self.generator.get_content_url(qr_code),
            },
        }

    async def get_content_meta(self, qr_code: str) -> Dict[str, Any]:
        """Link-preview metadata. Does not count as a scan."""
        qr_code = self._require_code(qr_code)
        mapping = await self._load_active(qr_code)

        item = mapping.item
        property_obj = item.property
        return {
            "title": f"{item.name} - {property_obj.name}",
            "description": item.description,
            "keywords": ", ".join(_keywords(item, property_obj)),
            "canonical_url": self.generator.get_content_url(qr_code),
            "og_image": item.media_url if item.media_type.value == "image" else None,
            "item_type": item.category or "instruction",
            "property_type": property_obj.property_type.value,
            "location": item.location,
        }

    async def record_content_view(self, qr_code: str, view: Dict[str, Any]) -> Dict[str, Any]:
        """
        Accept client analytics for a content view. The event is logged only;
        nothing is persisted and no scan is counted.
        """
        qr_code = self._require_code(qr_code)
        mapping = await self._load_active(qr_code)

        recorded_at = utcnow().isoformat()
        logger.info(
            f"Content view for QR {qr_code}",
            extra={
                "qr_code": qr_code,
                "item_id": str(mapping.item_id),
                "view_duration": view.get("view_duration") or 0,
                "user_agent": view.get("user_agent") or "unknown",
                "referrer": view.get("referrer") or "direct",
                "viewport_size": view.get("viewport_size") or "unknown",
            }
        )
        return {"qr_code": qr_code, "recorded_at": recorded_at}

    async def get_content_stats(self, qr_code: str, current_user: Any) -> Dict[str, Any]:
        """Scan statistics for the owner of the code. Does not count as a scan."""
        qr_code = self._require_code(qr_code)
        mapping = await self.guard.owned_qr_code(qr_code, current_user)

        return {
            "qr_code": qr_code,
            "status": mapping.status.value,
            "scan_count": mapping.scan_count or 0,
            "created_at": mapping.created_at.isoformat(),
            "last_scanned": mapping.last_scanned.isoformat() if mapping.last_scanned else None,
            "is_active": mapping.is_active,
        }
