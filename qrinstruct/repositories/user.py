"""
User repository. Users are seeded out of band and only read by the API.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
from qrinstruct.repositories.base import BaseRepository, DAOResult
from qrinstruct.models.user import User
from typing import Optional
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> DAOResult[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for (normalized before lookup)

        Returns:
            Result holding the user, or a NOT_FOUND result
        """
        try:
            normalized_email = User.validate_email_format(email)
        except ValueError as e:
            return DAOResult.invalid(str(e))

        return await self.get_by_field("email", normalized_email)

    async def ensure_user(
        self,
        user_id: uuid.UUID,
        email: str,
        name: str,
        avatar_url: Optional[str] = None
    ) -> DAOResult[User]:
        """
        Insert a user with a fixed ID unless it already exists.

        Returns:
            Result holding the user; `extra["created"]` tells whether it was inserted
        """
        try:
            existing = (
                await self.db.execute(select(User).where(User.id == user_id))
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            return await self._fail("fetch", e)

        if existing is not None:
            logger.debug(f"User {user_id} already present")
            return DAOResult.ok(existing, created=False)

        try:
            normalized_email = User.validate_email_format(email)
        except ValueError as e:
            return DAOResult.invalid(str(e))

        result = await self.create({
            "id": user_id,
            "email": normalized_email,
            "name": name,
            "avatar_url": avatar_url,
        })
        if not result.success:
            return result

        logger.info(f"Seeded user: {normalized_email} (ID: {user_id})")
        return DAOResult.ok(result.data, created=True)
