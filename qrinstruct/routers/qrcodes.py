"""
QR code API endpoints: generation, listing, status, download and statistics.
Static paths are declared before `/{qr_id}` so they are matched first.
"""

from fastapi import APIRouter, Depends, status, Path, Query
from fastapi.responses import JSONResponse, Response
from typing import Any, Dict, Optional
from uuid import UUID

from qrinstruct.config import settings
from qrinstruct.services.demo_user import DemoUser
from qrinstruct.services.qr_code import QRCodeService, serialize_qr_code
from qrinstruct.schemas.common import success_response
from qrinstruct.schemas.qr_code import QRCodeGenerateRequest, QRBatchRequest, QRStatusUpdate
from qrinstruct.schemas.error import QR_ERROR_RESPONSES
from qrinstruct.utils.dependencies import get_current_user, get_qr_code_service


router = APIRouter(prefix="/qrcodes", tags=["QR Codes"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Generate QR code for an item",
    responses=QR_ERROR_RESPONSES
)
async def generate_qr_code(
    request_data: QRCodeGenerateRequest,
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> Dict[str, Any]:
    """New active QR code with zero scans and an inline PNG data URL."""
    options = request_data.options.as_dict() if request_data.options else None
    qr_data = await qr_service.generate_qr_code(request_data.item_id, options, current_user)
    return success_response(qr_data, "QR code generated successfully")


@router.post(
    "/batch",
    status_code=status.HTTP_201_CREATED,
    summary="Generate QR codes for several items",
    responses=QR_ERROR_RESPONSES
)
async def generate_batch_qr_codes(
    request_data: QRBatchRequest,
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> JSONResponse:
    """
    Each item is processed independently. Answers 201 when at least one code
    was generated, otherwise 400 with the per-item failures.
    """
    options = request_data.options.as_dict() if request_data.options else None
    batch = await qr_service.generate_batch(request_data.item_ids, options, current_user)

    summary = batch["summary"]
    any_success = summary["successful"] > 0
    body = success_response(
        batch,
        f"Batch QR generation completed: {summary['successful']} successful, {summary['failed']} failed"
    )
    body["success"] = any_success
    if not any_success:
        body["code"] = "BATCH_FAILED"

    return JSONResponse(
        status_code=status.HTTP_201_CREATED if any_success else status.HTTP_400_BAD_REQUEST,
        content=body
    )


@router.get(
    "",
    summary="List QR codes of an item or property",
    responses=QR_ERROR_RESPONSES
)
async def list_qr_codes(
    item_id: Optional[UUID] = Query(None, alias="itemId"),
    property_id: Optional[UUID] = Query(None, alias="propertyId"),
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> Dict[str, Any]:
    listing = await qr_service.list_qr_codes(current_user, item_id=item_id, property_id=property_id)
    return success_response(listing, f"Found {listing['count']} QR codes")


@router.get(
    "/stats",
    summary="QR code statistics",
    responses=QR_ERROR_RESPONSES
)
async def get_qr_statistics(
    item_id: Optional[UUID] = Query(None, alias="itemId"),
    property_id: Optional[UUID] = Query(None, alias="propertyId"),
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> Dict[str, Any]:
    """Scoped to an item, a property, or every QR code the user owns."""
    stats = await qr_service.get_qr_statistics(current_user, item_id=item_id, property_id=property_id)
    return success_response({"stats": stats}, "QR code statistics retrieved successfully")


@router.get(
    "/{qr_id}",
    summary="Get QR code",
    responses=QR_ERROR_RESPONSES
)
async def get_qr_code(
    qr_id: str = Path(..., description="Public QR identifier"),
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> Dict[str, Any]:
    """Owner view of a QR code; not counted as a scan."""
    qr_code = await qr_service.get_qr_code(qr_id, current_user)
    return success_response(serialize_qr_code(qr_code))


@router.put(
    "/{qr_id}/status",
    summary="Activate or deactivate a QR code",
    responses=QR_ERROR_RESPONSES
)
async def update_qr_status(
    status_data: QRStatusUpdate,
    qr_id: str = Path(..., description="Public QR identifier"),
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> Dict[str, Any]:
    updated = await qr_service.update_qr_status(qr_id, status_data.status, current_user)
    return success_response(updated, f"QR code status updated to {status_data.status.value}")


@router.get(
    "/{qr_id}/download",
    summary="Download QR code image",
    response_class=Response,
    responses={
        **QR_ERROR_RESPONSES,
        200: {"content": {"image/png": {}}, "description": "PNG attachment"},
    }
)
async def download_qr_code(
    qr_id: str = Path(..., description="Public QR identifier"),
    size: int = Query(settings.qr_download_width, description="Image size in pixels (128-2048)"),
    format: str = Query("png", description="Image format; only png is supported"),
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> Response:
    png_bytes, filename = await qr_service.download_qr_code(qr_id, current_user, size, format)
    return Response(
        content=png_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.delete(
    "/{qr_id}",
    summary="Delete QR code",
    responses=QR_ERROR_RESPONSES
)
async def delete_qr_code(
    qr_id: str = Path(..., description="Public QR identifier"),
    current_user: DemoUser = Depends(get_current_user),
    qr_service: QRCodeService = Depends(get_qr_code_service)
) -> Dict[str, Any]:
    receipt = await qr_service.delete_qr_code(qr_id, current_user)
    return success_response(receipt, "QR code deleted successfully")
