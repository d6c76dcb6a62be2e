"""
Public content endpoints reached by scanning a QR code.
Only `/stats` requires the demo principal.
"""

from fastapi import APIRouter, Depends, Path
from typing import Any, Dict

from qrinstruct.services.demo_user import DemoUser
from qrinstruct.services.content import ContentService
from qrinstruct.schemas.common import success_response
from qrinstruct.schemas.content import ContentViewRequest
from qrinstruct.schemas.error import CONTENT_ERROR_RESPONSES, COMMON_ERROR_RESPONSES
from qrinstruct.utils.dependencies import get_current_user, get_content_service


router = APIRouter(prefix="/content", tags=["Content"])


@router.get(
    "/{qr_code}",
    summary="Resolve a scanned QR code",
    responses=CONTENT_ERROR_RESPONSES
)
async def get_content(
    qr_code: str = Path(..., description="Public QR identifier"),
    content_service: ContentService = Depends(get_content_service)
) -> Dict[str, Any]:
    """Item and property content for guests. Each successful call counts one scan."""
    content = await content_service.get_content_by_qr_code(qr_code)
    return success_response(content, "Content retrieved successfully")


@router.get(
    "/{qr_code}/meta",
    summary="Link-preview metadata",
    responses=CONTENT_ERROR_RESPONSES
)
async def get_content_meta(
    qr_code: str = Path(..., description="Public QR identifier"),
    content_service: ContentService = Depends(get_content_service)
) -> Dict[str, Any]:
    meta = await content_service.get_content_meta(qr_code)
    return success_response(meta)


@router.post(
    "/{qr_code}/view",
    summary="Record a content view",
    responses=CONTENT_ERROR_RESPONSES
)
async def record_content_view(
    view_data: ContentViewRequest,
    qr_code: str = Path(..., description="Public QR identifier"),
    content_service: ContentService = Depends(get_content_service)
) -> Dict[str, Any]:
    recorded = await content_service.record_content_view(qr_code, view_data.model_dump())
    return success_response(recorded, "Content view recorded successfully")


@router.get(
    "/{qr_code}/stats",
    summary="Scan statistics for the owner",
    responses=COMMON_ERROR_RESPONSES
)
async def get_content_stats(
    qr_code: str = Path(..., description="Public QR identifier"),
    current_user: DemoUser = Depends(get_current_user),
    content_service: ContentService = Depends(get_content_service)
) -> Dict[str, Any]:
    stats = await content_service.get_content_stats(qr_code, current_user)
    return success_response(stats, "Content statistics retrieved successfully")
