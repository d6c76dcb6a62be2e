"""
Tests for database models.
Covers enum values, serialization and computed attributes.
"""

import pytest
from sqlalchemy import inspect as sa_inspect

from qrinstruct.models.user import User
from qrinstruct.models.property import Property, PropertyType
from qrinstruct.models.item import Item, MediaType
from qrinstruct.models.qr_code import QRCode, QRStatus
from qrinstruct.repositories.property import PropertyRepository
from qrinstruct.services.demo_user import DemoUser


class TestUserModel:
    """Test User model validation."""

    def test_email_validation_valid(self):
        assert User.validate_email_format("Demo@QRInstruct.com") == "demo@qrinstruct.com"

    def test_email_validation_invalid(self):
        """Malformed addresses are rejected."""
        for email in ["invalid-email", "@qrinstruct.com", "manager@"]:
            with pytest.raises(ValueError, match="Invalid email format"):
                User.validate_email_format(email)


class TestEnums:
    """Stored enum values are the lowercase strings clients send."""

    def test_property_types(self):
        assert PropertyType.values() == ["apartment", "house", "condo", "studio", "other"]

    def test_media_types(self):
        assert MediaType.values() == ["youtube", "image", "pdf", "text", "other"]

    def test_qr_statuses(self):
        assert QRStatus.values() == ["active", "inactive"]
        assert QRStatus("inactive") is QRStatus.INACTIVE


class TestPropertyModel:
    """Test Property model serialization."""

    @pytest.mark.asyncio
    async def test_to_dict(self, test_property: Property, demo_user: DemoUser):
        data = test_property.to_dict()

        assert data["id"] == str(test_property.id)
        assert data["user_id"] == str(demo_user.id)
        assert data["name"] == "Sunset Apt"
        assert data["property_type"] == "apartment"
        assert data["settings"] == {}
        assert data["item_count"] == 0
        assert data["has_items"] is False
        assert "items" not in data

    @pytest.mark.asyncio
    async def test_to_dict_with_items(self, property_repository: PropertyRepository, test_item: Item):
        """Item summaries are nested when requested."""
        result = await property_repository.get_property_by_id(test_item.property_id)
        data = result.data.to_dict(include_items=True)

        assert data["item_count"] == 1
        assert data["has_items"] is True
        assert data["items"][0]["id"] == str(test_item.id)
        assert data["items"][0]["media_type"] == "text"

    @pytest.mark.asyncio
    async def test_default_property_type(self, property_repository: PropertyRepository, demo_user: DemoUser):
        result = await property_repository.create_property(demo_user.id, {"name": "Loft"})

        assert result.success
        assert result.data.property_type == PropertyType.OTHER
        assert result.data.settings == {}


class TestItemModel:
    """Test Item model serialization."""

    @pytest.mark.asyncio
    async def test_to_dict(self, test_item: Item):
        data = test_item.to_dict()

        assert data["property_id"] == str(test_item.property_id)
        assert data["name"] == "Coffee Maker"
        assert data["location"] == "Kitchen"
        assert data["media_type"] == "text"
        assert data["metadata"] == {}

    def test_category_from_metadata(self):
        item = Item(name="Heater", item_metadata={"category": "appliance"})
        assert item.category == "appliance"

        assert Item(name="Lamp", item_metadata={}).category is None

    def test_category_and_property_relationship_coexist(self):
        """`category` stays a plain attribute while `property` is the mapped parent."""
        assert isinstance(vars(Item)["category"], property)
        assert "property" in sa_inspect(Item).relationships
        assert "category" not in sa_inspect(Item).relationships


class TestQRCodeModel:
    """Test QRCode model serialization."""

    @pytest.mark.asyncio
    async def test_new_code_is_active_with_zero_scans(self, test_qr_code: QRCode):
        assert test_qr_code.status == QRStatus.ACTIVE
        assert test_qr_code.is_active
        assert test_qr_code.scan_count == 0
        assert test_qr_code.last_scanned is None

    @pytest.mark.asyncio
    async def test_to_dict(self, test_qr_code: QRCode):
        data = test_qr_code.to_dict()

        assert data["qr_id"] == test_qr_code.qr_id
        assert data["item_id"] == str(test_qr_code.item_id)
        assert data["status"] == "active"
        assert data["scan_count"] == 0
        assert data["last_scanned"] is None
        assert data["content_url"].endswith(f"/content/{test_qr_code.qr_id}")
        assert "item" not in data
