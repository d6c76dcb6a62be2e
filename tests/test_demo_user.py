"""
Tests for the demo identity provider.
"""

import pytest
import uuid

from qrinstruct.config import settings
from qrinstruct.repositories.user import UserRepository
from qrinstruct.services.demo_user import (
    DemoUser,
    get_demo_user,
    get_demo_user_id,
    is_demo_user,
    ensure_demo_user,
)


class TestDemoUser:

    def test_built_from_settings(self):
        user = get_demo_user()

        assert user.id == uuid.UUID(settings.demo_user_id)
        assert user.email == settings.demo_user_email
        assert user.name == settings.demo_user_name

    def test_owns(self, demo_user: DemoUser):
        assert demo_user.owns(demo_user.id)
        assert demo_user.owns(str(demo_user.id))
        assert not demo_user.owns(uuid.uuid4())

    def test_is_demo_user(self):
        assert is_demo_user(settings.demo_user_id)
        assert is_demo_user(settings.demo_user_id.upper())
        assert is_demo_user(get_demo_user_id())
        assert not is_demo_user(str(uuid.uuid4()))
        assert not is_demo_user("demo")

    def test_to_dict(self, demo_user: DemoUser):
        data = demo_user.to_dict()

        assert data["id"] == settings.demo_user_id
        assert data["demo_mode"] is True


class TestDemoUserSeed:

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session, user_repository: UserRepository):
        """The session fixture seeded once; seeding again inserts nothing."""
        assert await ensure_demo_user(db_session) is False

        result = await user_repository.get_by_id(get_demo_user_id())
        assert result.success
        assert result.data.email == settings.demo_user_email
