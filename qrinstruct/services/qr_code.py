"""
QR code service: generation, listing, status changes, downloads and statistics.
All owner-facing operations walk the QR code -> item -> property chain first.
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from qrinstruct.config import settings
from qrinstruct.repositories.qr_code import QRCodeRepository
from qrinstruct.models.qr_code import QRCode
from qrinstruct.services.ownership import OwnershipGuard
from qrinstruct.services.qr_generator import QRGenerator, qr_generator
from qrinstruct.utils.exceptions import (
    APIException,
    ValidationError,
    BatchLimitExceededError,
    exception_for_result,
)
import uuid
import logging

logger = logging.getLogger(__name__)

DOWNLOAD_MIN_SIZE = 128
DOWNLOAD_MAX_SIZE = 2048
DOWNLOAD_FORMATS = ("png",)


def serialize_qr_code(qr_code: QRCode, data_url: Optional[str] = None) -> Dict[str, Any]:
    """QR code as returned to owners, with the item summary when it is loaded."""
    data = qr_code.to_dict(include_item=True)
    if not data["content_url"]:
        data["content_url"] = qr_generator.get_content_url(qr_code.qr_id)
    if data_url:
        data["qr_code_data_url"] = data_url
    return data


class QRCodeService:
    """QR code lifecycle for the owner of the property chain."""

    def __init__(self, db_session: AsyncSession, generator: Optional[QRGenerator] = None):
        self.db = db_session
        self.qr_repo = QRCodeRepository(db_session)
        self.guard = OwnershipGuard(db_session)
        self.generator = generator or qr_generator

    def _check_format(self, qr_id: str) -> None:
        if not self.generator.validate_qr_format(qr_id):
            raise ValidationError("Invalid QR code format")

    async def generate_qr_code(
        self,
        item_id: uuid.UUID,
        options: Optional[Dict[str, Any]],
        current_user: Any
    ) -> Dict[str, Any]:
        """
        Encode a new QR code for an owned item and store its mapping.

        Returns:
            The stored QR code with `qr_code_data_url` and `item_name`
        """
        item, _ = await self.guard.owned_item(item_id, current_user)

        try:
            generated = self.generator.create_qr_code(item.id, options)
        except ValueError as e:
            raise ValidationError(str(e))

        result = await self.qr_repo.create_qr_mapping(
            item.id,
            generated.qr_id,
            {"content_url": generated.content_url, **generated.options},
        )
        if not result.success:
            raise exception_for_result(result, "QR code")

        logger.info(f"QR code generated by user {current_user.id}: {generated.qr_id} for item {item.id}")
        data = serialize_qr_code(result.data, data_url=generated.data_url)
        data["item_name"] = item.name
        return data

    async def generate_batch(
        self,
        item_ids: List[uuid.UUID],
        options: Optional[Dict[str, Any]],
        current_user: Any
    ) -> Dict[str, Any]:
        """
        Generate one QR code per item. Items are processed independently; a
        failure on one is reported and the rest continue.

        Raises:
            BatchLimitExceededError: If more items than the configured limit are sent
        """
        if len(item_ids) > settings.qr_batch_limit:
            raise BatchLimitExceededError(settings.qr_batch_limit)

        successful: List[Dict[str, Any]] = []
        failed: List[Dict[str, Any]] = []

        for item_id in item_ids:
            try:
                qr_data = await self.generate_qr_code(item_id, options, current_user)
            except APIException as e:
                failed.append({"item_id": str(item_id), "error": e.detail, "code": e.error_code})
                continue

            successful.append({
                "item_id": str(item_id),
                "item_name": qr_data["item_name"],
                "qr_id": qr_data["qr_id"],
                "content_url": qr_data["content_url"],
                "status": "success",
            })

        total = len(item_ids)
        logger.info(f"Batch QR generation: {len(successful)}/{total} succeeded")
        return {
            "successful": successful,
            "failed": failed,
            "summary": {
                "total": total,
                "successful": len(successful),
                "failed": len(failed),
                "success_rate": round(len(successful) / total * 100, 2) if total else 0.0,
            },
        }

    async def list_qr_codes(
        self,
        current_user: Any,
        item_id: Optional[uuid.UUID] = None,
        property_id: Optional[uuid.UUID] = None
    ) -> Dict[str, Any]:
        """QR codes of one owned item or of every item in an owned property."""
        if item_id:
            await self.guard.owned_item(item_id, current_user)
            result = await self.qr_repo.get_qr_codes_by_item_id(item_id)
        elif property_id:
            await self.guard.owned_property(property_id, current_user)
            result = await self.qr_repo.get_qr_codes_by_property_id(property_id)
        else:
            raise ValidationError("Either item_id or property_id query parameter is required")

        if not result.success:
            raise exception_for_result(result, "QR code")

        qr_codes = [serialize_qr_code(qr) for qr in result.data]
        return {"qr_codes": qr_codes, "count": len(qr_codes)}

    async def get_qr_code(self, qr_id: str, current_user: Any) -> QRCode:
        """Owner lookup of a single QR code. Does not count as a scan."""
        self._check_format(qr_id)
        return await self.guard.owned_qr_code(qr_id, current_user)

    async def update_qr_status(self, qr_id: str, status: Any, current_user: Any) -> Dict[str, Any]:
        """
        Switch an owned QR code between active and inactive.

        Raises:
            ConflictError: If the code already has the requested status
        """
        self._check_format(qr_id)
        await self.guard.owned_qr_code(qr_id, current_user)

        result = await self.qr_repo.update_qr_status(qr_id, status)
        if not result.success:
            raise exception_for_result(result, "QR code")

        logger.info(f"QR code {qr_id} status set to {result.data.status.value} by user {current_user.id}")
        return {
            "qr_code": serialize_qr_code(result.data),
            "previous_status": result.extra["previous_status"],
        }

    async def delete_qr_code(self, qr_id: str, current_user: Any) -> Dict[str, Any]:
        """Hard-delete an owned QR code and return a receipt."""
        self._check_format(qr_id)
        await self.guard.owned_qr_code(qr_id, current_user)

        result = await self.qr_repo.delete_qr_mapping(qr_id)
        if not result.success:
            raise exception_for_result(result, "QR code")

        deleted = result.data
        logger.info(f"QR code {qr_id} deleted by user {current_user.id}")
        return {
            "deleted_qr_code": {
                "qr_id": deleted.qr_id,
                "item_id": str(deleted.item_id),
                "status": deleted.status.value,
                "deleted_at": result.extra["deleted_at"],
            }
        }

    async def download_qr_code(
        self,
        qr_id: str,
        current_user: Any,
        size: int = settings.qr_download_width,
        image_format: str = "png"
    ) -> Tuple[bytes, str]:
        """
        Render a print-quality PNG of an owned QR code.

        Returns:
            (png bytes, attachment filename)
        """
        image_format = (image_format or "png").lower()
        if image_format not in DOWNLOAD_FORMATS:
            raise ValidationError("Only PNG format is supported")
        if not DOWNLOAD_MIN_SIZE <= size <= DOWNLOAD_MAX_SIZE:
            raise ValidationError(
                f"Size must be between {DOWNLOAD_MIN_SIZE} and {DOWNLOAD_MAX_SIZE} pixels"
            )

        self._check_format(qr_id)
        qr_code = await self.guard.owned_qr_code(qr_id, current_user)

        content_url = (qr_code.generation_options or {}).get("content_url") \
            or self.generator.get_content_url(qr_code.qr_id)
        png_bytes = self.generator.render_png(
            content_url,
            {"width": size, "margin": 2, "error_correction_level": "H"},
        )
        filename = self.generator.generate_qr_file_name(qr_code.item.name, qr_code.qr_id, image_format)

        logger.debug(f"QR code {qr_id} rendered for download at {size}px")
        return png_bytes, filename

    async def get_qr_statistics(
        self,
        current_user: Any,
        item_id: Optional[uuid.UUID] = None,
        property_id: Optional[uuid.UUID] = None
    ) -> Dict[str, Any]:
        """Statistics for an owned item, an owned property, or everything the user owns."""
        if item_id:
            await self.guard.owned_item(item_id, current_user)
            result = await self.qr_repo.get_qr_statistics(item_id=item_id)
        elif property_id:
            await self.guard.owned_property(property_id, current_user)
            result = await self.qr_repo.get_qr_statistics(property_id=property_id)
        else:
            result = await self.qr_repo.get_qr_statistics(user_id=current_user.id)

        if not result.success:
            raise exception_for_result(result, "QR code")
        return result.data
