"""
Demo identity provider.
Every request runs as one fixed principal configured in settings; there is no
real authentication.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from qrinstruct.config import settings
from qrinstruct.repositories.user import UserRepository
from qrinstruct.utils.exceptions import exception_for_result
import uuid
import logging

logger = logging.getLogger(__name__)

DEMO_AVATAR_URL = "https://via.placeholder.com/150/007bff/ffffff?text=DU"


@dataclass(frozen=True)
class DemoUser:
    """The principal attached to a request."""

    id: uuid.UUID
    email: str
    name: str
    avatar_url: Optional[str] = None

    def owns(self, owner_id: Any) -> bool:
        return str(owner_id) == str(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "avatar_url": self.avatar_url,
            "demo_mode": True,
        }


def get_demo_user_id() -> uuid.UUID:
    return uuid.UUID(settings.demo_user_id)


def get_demo_user() -> DemoUser:
    """The fixed principal built from settings."""
    return DemoUser(
        id=get_demo_user_id(),
        email=settings.demo_user_email,
        name=settings.demo_user_name,
        avatar_url=DEMO_AVATAR_URL,
    )


def is_demo_user(user_id: Any) -> bool:
    """Compare any id representation against the demo principal."""
    try:
        return uuid.UUID(str(user_id)) == get_demo_user_id()
    except ValueError:
        return False


async def ensure_demo_user(session: AsyncSession) -> bool:
    """
    Seed the demo user row if it is missing.

    Returns:
        True when the row was inserted, False when it already existed

    Raises:
        APIException: If the store rejects the insert
    """
    demo = get_demo_user()
    result = await UserRepository(session).ensure_user(
        user_id=demo.id,
        email=demo.email,
        name=demo.name,
        avatar_url=demo.avatar_url,
    )
    if not result.success:
        logger.error(f"Failed to seed demo user: {result.error}")
        raise exception_for_result(result, "User")

    return result.extra.get("created", False)
