"""
QR code repository (data-access layer for the qr_codes table).
Owns the scan counter: the only writes to scan_count/last_scanned happen here,
as a single atomic UPDATE.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, update
from sqlalchemy.orm import joinedload
from sqlalchemy.orm.attributes import set_committed_value
from qrinstruct.repositories.base import BaseRepository, DAOResult
from qrinstruct.models.qr_code import QRCode, QRStatus
from qrinstruct.models.item import Item
from qrinstruct.models.property import Property
from qrinstruct.database import utcnow
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class QRCodeRepository(BaseRepository[QRCode]):
    """Repository for QR code mappings."""

    resource_name = "QR code"

    def __init__(self, db: AsyncSession):
        super().__init__(QRCode, db)

    async def create_qr_mapping(
        self,
        item_id: uuid.UUID,
        qr_id: str,
        generation_options: Optional[Dict[str, Any]] = None
    ) -> DAOResult[QRCode]:
        """
        Map a freshly generated qr_id to an item.
        The mapping starts active with zero scans. An item may own several codes.
        """
        if not item_id or not qr_id:
            return DAOResult.invalid("Item ID and QR ID are required")

        try:
            item_exists = (
                await self.db.execute(select(Item.id).where(Item.id == item_id))
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            return await self._fail("validate item for", e)

        if item_exists is None:
            return DAOResult.not_found("Item", item_id)

        result = await self.create({
            "item_id": item_id,
            "qr_id": qr_id,
            "status": QRStatus.ACTIVE,
            "scan_count": 0,
            "generation_options": generation_options or {},
        })
        if result.success:
            logger.info(f"QR mapping created: {qr_id} -> Item {item_id}")
        return result

    async def get_qr_mapping_by_qr_id(self, qr_id: str, record_scan: bool = False) -> DAOResult[QRCode]:
        """
        Fetch a QR code with its item and the item's property in one joined query.

        Args:
            qr_id: Public QR token
            record_scan: Count this lookup as a scan. Only active codes are counted.

        Returns:
            Result holding the QR code (item and item.property loaded). When a
            scan was recorded the returned scan_count is the post-increment value.
        """
        if not qr_id:
            return DAOResult.invalid("QR ID is required")

        try:
            query = (
                select(QRCode)
                .options(joinedload(QRCode.item).joinedload(Item.property))
                .where(QRCode.qr_id == qr_id)
                .execution_options(populate_existing=True)
            )
            qr_code = (await self.db.execute(query)).unique().scalar_one_or_none()
        except SQLAlchemyError as e:
            return await self._fail("fetch", e)

        if qr_code is None:
            return DAOResult.not_found(self.resource, qr_id)

        if record_scan and qr_code.is_active:
            scan = await self.increment_scan_count(qr_id)
            if not scan.success:
                return scan
            set_committed_value(qr_code, "scan_count", scan.data["scan_count"])
            set_committed_value(qr_code, "last_scanned", scan.data["last_scanned"])

        return DAOResult.ok(qr_code, scan_recorded=bool(record_scan and qr_code.is_active))

    async def increment_scan_count(self, qr_id: str) -> DAOResult[Dict[str, Any]]:
        """
        Atomically add one scan and stamp last_scanned.
        Runs as `scan_count = scan_count + 1` in the store so concurrent scans never lose updates.
        """
        scanned_at = utcnow()
        try:
            stmt = (
                update(QRCode)
                .where(QRCode.qr_id == qr_id)
                .values(
                    scan_count=QRCode.scan_count + 1,
                    last_scanned=scanned_at,
                    updated_at=scanned_at,
                )
                .returning(QRCode.scan_count)
                .execution_options(synchronize_session=False)
            )
            new_count = (await self.db.execute(stmt)).scalar_one_or_none()
            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._fail("increment scan count of", e)

        if new_count is None:
            return DAOResult.not_found(self.resource, qr_id)

        logger.debug(f"QR code {qr_id} scan count incremented to: {new_count}")
        return DAOResult.ok({"scan_count": new_count, "last_scanned": scanned_at})

    async def get_qr_codes_by_item_id(self, item_id: uuid.UUID) -> DAOResult[List[QRCode]]:
        """QR codes of one item, newest first."""
        return await self._list_joined(Item.id == item_id)

    async def get_qr_codes_by_property_id(self, property_id: uuid.UUID) -> DAOResult[List[QRCode]]:
        """QR codes of every item in a property, via an explicit join through items."""
        return await self._list_joined(Item.property_id == property_id)

    async def get_qr_codes_by_user_id(self, user_id: uuid.UUID) -> DAOResult[List[QRCode]]:
        """QR codes across every property a user owns."""
        return await self._list_joined(Property.user_id == user_id)

    async def _list_joined(self, condition) -> DAOResult[List[QRCode]]:
        try:
            query = (
                select(QRCode)
                .join(Item, QRCode.item_id == Item.id)
                .join(Property, Item.property_id == Property.id)
                .options(joinedload(QRCode.item))
                .where(condition)
                .order_by(QRCode.created_at.desc())
                .execution_options(populate_existing=True)
            )
            qr_codes = list((await self.db.execute(query)).unique().scalars().all())
        except SQLAlchemyError as e:
            return await self._fail("list", e)

        logger.debug(f"Retrieved {len(qr_codes)} QR codes")
        return DAOResult.ok(qr_codes, count=len(qr_codes))

    async def update_qr_status(self, qr_id: str, status: Any) -> DAOResult[QRCode]:
        """
        Switch a QR code between active and inactive.

        Returns:
            Result holding the updated code with `extra["previous_status"]`, a
            CONFLICT result when the code already has that status, or NOT_FOUND
        """
        try:
            new_status = QRStatus(status)
        except ValueError:
            return DAOResult.invalid(f"Status must be one of: {', '.join(QRStatus.values())}")

        existing = await self.get_by_field("qr_id", qr_id)
        if not existing.success:
            return existing

        # Read before writing: the row loses its old value once updated
        previous_status = existing.data.status
        if previous_status == new_status:
            return DAOResult.conflict(f"QR code is already {new_status.value}")

        result = await self.update(existing.data.id, {"status": new_status, "updated_at": utcnow()})
        if not result.success:
            return result

        logger.info(f"QR code {qr_id} status updated: {previous_status.value} -> {new_status.value}")
        return DAOResult.ok(result.data, previous_status=previous_status.value)

    async def delete_qr_mapping(self, qr_id: str) -> DAOResult[QRCode]:
        """Hard-delete a QR code, returning the row as it was for a receipt."""
        existing = await self.get_by_field("qr_id", qr_id)
        if not existing.success:
            return existing

        deleted = await self.delete(existing.data.id)
        if not deleted.success:
            return deleted

        logger.info(f"QR code {qr_id} deleted")
        return DAOResult.ok(existing.data, deleted_at=utcnow().isoformat())

    async def get_qr_statistics(
        self,
        item_id: Optional[uuid.UUID] = None,
        property_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> DAOResult[Dict[str, Any]]:
        """
        Aggregate counts and scans for the QR codes of an item, a property or a user.
        The most and least scanned codes are picked by sorting in memory.
        """
        if item_id:
            listing = await self.get_qr_codes_by_item_id(item_id)
        elif property_id:
            listing = await self.get_qr_codes_by_property_id(property_id)
        elif user_id:
            listing = await self.get_qr_codes_by_user_id(user_id)
        else:
            return DAOResult.invalid("An item, property or user scope is required")

        if not listing.success:
            return listing

        return DAOResult.ok(summarize_qr_codes(listing.data))


def _scan_entry(qr_code: QRCode) -> Dict[str, Any]:
    return {
        "qr_id": qr_code.qr_id,
        "item_id": str(qr_code.item_id),
        "item_name": qr_code.item.name if qr_code.item_loaded and qr_code.item else None,
        "scan_count": qr_code.scan_count or 0,
        "last_scanned": qr_code.last_scanned.isoformat() if qr_code.last_scanned else None,
    }


def summarize_qr_codes(qr_codes: List[QRCode]) -> Dict[str, Any]:
    """Count/active/inactive/total_scans plus most and least scanned entries."""
    total = len(qr_codes)
    active = sum(1 for qr in qr_codes if qr.status == QRStatus.ACTIVE)
    total_scans = sum(qr.scan_count or 0 for qr in qr_codes)

    ranked = sorted(qr_codes, key=lambda qr: qr.scan_count or 0, reverse=True)

    return {
        "total_qr_codes": total,
        "active_qr_codes": active,
        "inactive_qr_codes": total - active,
        "total_scans": total_scans,
        "average_scans": round(total_scans / total, 2) if total else 0,
        "most_scanned": _scan_entry(ranked[0]) if ranked else None,
        "least_scanned": _scan_entry(ranked[-1]) if ranked else None,
    }
