"""
FastAPI dependency injection utilities for the demo principal and services.
"""

from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from qrinstruct.config import settings
from qrinstruct.database import get_db
from qrinstruct.services.demo_user import DemoUser, get_demo_user, is_demo_user
from qrinstruct.services.property import PropertyService
from qrinstruct.services.item import ItemService
from qrinstruct.services.qr_code import QRCodeService
from qrinstruct.services.content import ContentService
from qrinstruct.utils.exceptions import AuthenticationError
import logging

logger = logging.getLogger(__name__)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


async def get_item_service(db: AsyncSession = Depends(get_db)) -> ItemService:
    return ItemService(db)


async def get_qr_code_service(db: AsyncSession = Depends(get_db)) -> QRCodeService:
    return QRCodeService(db)


async def get_content_service(db: AsyncSession = Depends(get_db)) -> ContentService:
    return ContentService(db)


async def get_current_user(request: Request) -> DemoUser:
    """
    Resolve the principal for a request.

    The demo header is optional; when it is absent the demo user is assumed.
    A header naming any other user is rejected.

    Raises:
        AuthenticationError: If the header carries an unknown user id
    """
    header_value: Optional[str] = request.headers.get(settings.demo_user_header)

    if header_value is not None and not is_demo_user(header_value.strip()):
        logger.warning(f"Rejected demo user header: {header_value!r}")
        raise AuthenticationError("Invalid demo user ID")

    user = get_demo_user()
    request.state.user_id = str(user.id)
    return user
