"""
Tests for repository classes.
Repositories never raise on store failures; every call is checked through its DAOResult.
"""

import asyncio
import pytest
import uuid
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from qrinstruct.models.property import Property, PropertyType
from qrinstruct.models.item import Item, MediaType
from qrinstruct.models.qr_code import QRCode, QRStatus
from qrinstruct.repositories.base import DAOResult, ResultCode
from qrinstruct.repositories.user import UserRepository
from qrinstruct.repositories.property import PropertyRepository
from qrinstruct.repositories.item import ItemRepository
from qrinstruct.repositories.qr_code import QRCodeRepository, summarize_qr_codes
from qrinstruct.services.demo_user import DemoUser, ensure_demo_user, get_demo_user_id
from tests.conftest import PropertyFactory, ItemFactory, QRCodeFactory


class TestDAOResult:
    """Result constructors carry the code services map to HTTP errors."""

    def test_ok(self):
        result = DAOResult.ok("value", count=1)
        assert result.success
        assert result.data == "value"
        assert result.extra == {"count": 1}

    def test_not_found_message(self):
        result = DAOResult.not_found("Item", "abc")
        assert not result.success
        assert result.is_not_found
        assert result.error == "Item not found with ID: abc"

    def test_failure_codes(self):
        assert DAOResult.invalid("bad").code == ResultCode.VALIDATION_ERROR
        assert DAOResult.conflict("again").code == ResultCode.CONFLICT
        assert DAOResult.failure("down").code == ResultCode.DATABASE_ERROR


class TestBaseRepository:
    """Test base repository functionality through PropertyRepository."""

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, property_repository: PropertyRepository):
        result = await property_repository.get_by_id(uuid.uuid4())

        assert not result.success
        assert result.code == ResultCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_by_unknown_field(self, property_repository: PropertyRepository):
        result = await property_repository.get_by_field("price", 10)

        assert result.code == ResultCode.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_update_requires_data(self, property_repository: PropertyRepository, test_property: Property):
        result = await property_repository.update(test_property.id, {})

        assert result.code == ResultCode.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_update_not_found(self, property_repository: PropertyRepository):
        result = await property_repository.update(uuid.uuid4(), {"name": "Nowhere"})

        assert result.is_not_found

    @pytest.mark.asyncio
    async def test_delete_not_found(self, property_repository: PropertyRepository):
        result = await property_repository.delete(uuid.uuid4())

        assert result.is_not_found

    @pytest.mark.asyncio
    async def test_count(
        self,
        property_repository: PropertyRepository,
        test_property: Property,
        demo_user: DemoUser
    ):
        count = await property_repository.count({"user_id": demo_user.id})

        assert count.data == 1


class TestUserRepository:

    @pytest.mark.asyncio
    async def test_demo_user_seeded_once(self, user_repository: UserRepository, demo_user: DemoUser):
        """The session fixture already seeded the demo user."""
        result = await user_repository.ensure_user(demo_user.id, demo_user.email, demo_user.name)

        assert result.success
        assert result.extra["created"] is False

    @pytest.mark.asyncio
    async def test_get_by_email_normalizes(self, user_repository: UserRepository, demo_user: DemoUser):
        result = await user_repository.get_by_email(demo_user.email.upper())

        assert result.success
        assert result.data.id == demo_user.id

    @pytest.mark.asyncio
    async def test_get_by_email_invalid(self, user_repository: UserRepository):
        result = await user_repository.get_by_email("not-an-email")

        assert result.code == ResultCode.VALIDATION_ERROR


class TestPropertyRepository:
    """Test property-specific repository functionality."""

    @pytest.mark.asyncio
    async def test_create_property_trims_fields(self, property_repository: PropertyRepository, demo_user: DemoUser):
        result = await property_repository.create_property(demo_user.id, {
            "name": "  Harbor View  ",
            "description": "   ",
            "property_type": "condo",
        })

        assert result.success
        assert result.data.name == "Harbor View"
        assert result.data.description is None
        assert result.data.property_type == PropertyType.CONDO

    @pytest.mark.asyncio
    async def test_create_property_requires_name(self, property_repository: PropertyRepository, demo_user: DemoUser):
        result = await property_repository.create_property(demo_user.id, {"name": "  "})

        assert result.code == ResultCode.VALIDATION_ERROR
        assert result.error == "User ID and property name are required"

    @pytest.mark.asyncio
    async def test_create_property_rejects_unknown_type(
        self,
        property_repository: PropertyRepository,
        demo_user: DemoUser
    ):
        result = await property_repository.create_property(
            demo_user.id, {"name": "Castle", "property_type": "castle"}
        )

        assert result.code == ResultCode.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_list_is_scoped_to_owner(
        self,
        property_repository: PropertyRepository,
        test_property: Property,
        foreign_property: Property,
        demo_user: DemoUser
    ):
        result = await property_repository.get_properties_by_user_id(demo_user.id)

        assert [p.id for p in result.data] == [test_property.id]

    @pytest.mark.asyncio
    async def test_update_property_partial(self, property_repository: PropertyRepository, test_property: Property):
        result = await property_repository.update_property(
            test_property.id, {"address": "1 New Street", "owner": "ignored"}
        )

        assert result.success
        assert result.data.address == "1 New Street"
        assert result.data.name == "Sunset Apt"

    @pytest.mark.asyncio
    async def test_update_property_rejects_blank_name(
        self,
        property_repository: PropertyRepository,
        test_property: Property
    ):
        result = await property_repository.update_property(test_property.id, {"name": " "})

        assert result.code == ResultCode.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_delete_property_cascades(
        self,
        property_repository: PropertyRepository,
        item_repository: ItemRepository,
        qr_repository: QRCodeRepository,
        test_qr_code: QRCode
    ):
        """Items and QR codes disappear with their property."""
        item_result = await item_repository.get_item_by_id(test_qr_code.item_id)
        property_id = item_result.data.property_id

        result = await property_repository.delete_property(property_id)

        assert result.success
        assert result.extra["cascade_info"]["items_affected"] == 1
        assert (await item_repository.get_item_by_id(test_qr_code.item_id)).is_not_found
        assert (await qr_repository.get_qr_mapping_by_qr_id(test_qr_code.qr_id)).is_not_found

    @pytest.mark.asyncio
    async def test_property_statistics(
        self,
        property_repository: PropertyRepository,
        test_qr_code: QRCode,
        demo_user: DemoUser
    ):
        await PropertyFactory.create_property(property_repository, demo_user.id, name="Empty Studio")

        result = await property_repository.get_property_statistics(demo_user.id)

        assert result.data == {
            "total_properties": 2,
            "total_items": 1,
            "total_qr_codes": 1,
            "properties_with_items": 1,
        }


class TestItemRepository:
    """Test item-specific repository functionality."""

    @pytest.mark.asyncio
    async def test_create_item_defaults(self, item_repository: ItemRepository, test_property: Property):
        result = await item_repository.create_item(test_property.id, {"name": "Thermostat"})

        assert result.success
        assert result.data.media_type == MediaType.TEXT
        assert result.data.item_metadata == {}
        assert result.extra["property_info"] == {
            "property_id": str(test_property.id),
            "property_name": "Sunset Apt",
        }

    @pytest.mark.asyncio
    async def test_create_item_unknown_property(self, item_repository: ItemRepository):
        result = await item_repository.create_item(uuid.uuid4(), {"name": "Ghost"})

        assert result.is_not_found

    @pytest.mark.asyncio
    async def test_create_item_requires_name(self, item_repository: ItemRepository, test_property: Property):
        result = await item_repository.create_item(test_property.id, {"name": ""})

        assert result.error == "Item name is required"

    @pytest.mark.asyncio
    async def test_update_item_metadata(self, item_repository: ItemRepository, test_item: Item):
        result = await item_repository.update_item(
            test_item.id, {"metadata": {"difficulty": "easy"}, "media_type": "youtube"}
        )

        assert result.data.item_metadata == {"difficulty": "easy"}
        assert result.data.media_type == MediaType.YOUTUBE

    @pytest.mark.asyncio
    async def test_update_item_location(self, item_repository: ItemRepository, test_item: Item):
        result = await item_repository.update_item_location(test_item.id, "Pantry")

        assert result.success
        assert result.data.location == "Pantry"
        assert result.extra["previous_location"] == "Kitchen"
        assert result.extra["new_location"] == "Pantry"

    @pytest.mark.asyncio
    async def test_clear_item_location(self, item_repository: ItemRepository, test_item: Item):
        result = await item_repository.update_item_location(test_item.id, "  ")

        assert result.data.location is None

    @pytest.mark.asyncio
    async def test_delete_item_cascades_qr_codes(
        self,
        item_repository: ItemRepository,
        qr_repository: QRCodeRepository,
        test_qr_code: QRCode
    ):
        await QRCodeFactory.create_qr_code(qr_repository, test_qr_code.item_id)

        result = await item_repository.delete_item(test_qr_code.item_id)

        assert result.success
        assert result.extra["cascade_info"]["qr_codes_affected"] == 2
        assert (await qr_repository.get_qr_mapping_by_qr_id(test_qr_code.qr_id)).is_not_found


class TestQRCodeRepository:
    """Test QR code mappings, scan counting and statistics."""

    @pytest.mark.asyncio
    async def test_create_mapping_unknown_item(self, qr_repository: QRCodeRepository):
        result = await qr_repository.create_qr_mapping(uuid.uuid4(), str(uuid.uuid4()))

        assert result.is_not_found

    @pytest.mark.asyncio
    async def test_item_may_own_several_codes(self, qr_repository: QRCodeRepository, test_item: Item):
        first = await QRCodeFactory.create_qr_code(qr_repository, test_item.id)
        second = await QRCodeFactory.create_qr_code(qr_repository, test_item.id)

        result = await qr_repository.get_qr_codes_by_item_id(test_item.id)

        assert {qr.qr_id for qr in result.data} == {first.qr_id, second.qr_id}
        assert all(qr.is_active for qr in result.data)

    @pytest.mark.asyncio
    async def test_lookup_loads_ownership_chain(
        self,
        qr_repository: QRCodeRepository,
        test_qr_code: QRCode,
        demo_user: DemoUser
    ):
        result = await qr_repository.get_qr_mapping_by_qr_id(test_qr_code.qr_id)

        assert result.data.item.name == "Coffee Maker"
        assert result.data.item.property.user_id == demo_user.id
        assert result.data.scan_count == 0
        assert result.extra["scan_recorded"] is False

    @pytest.mark.asyncio
    async def test_lookup_unknown(self, qr_repository: QRCodeRepository):
        result = await qr_repository.get_qr_mapping_by_qr_id(str(uuid.uuid4()))

        assert result.is_not_found

    @pytest.mark.asyncio
    async def test_record_scan_increments(self, qr_repository: QRCodeRepository, test_qr_code: QRCode):
        first = await qr_repository.get_qr_mapping_by_qr_id(test_qr_code.qr_id, record_scan=True)
        assert first.data.scan_count == 1
        assert first.data.last_scanned is not None
        assert first.extra["scan_recorded"] is True

        second = await qr_repository.get_qr_mapping_by_qr_id(test_qr_code.qr_id, record_scan=True)
        assert second.data.scan_count == 2

    @pytest.mark.asyncio
    async def test_increment_is_applied_in_store(self, qr_repository: QRCodeRepository, test_qr_code: QRCode):
        """Each increment adds to the stored value rather than a stale in-memory copy."""
        for _ in range(5):
            result = await qr_repository.increment_scan_count(test_qr_code.qr_id)
            assert result.success

        stored = await qr_repository.get_by_field("qr_id", test_qr_code.qr_id)
        assert stored.data.scan_count == 5
        assert result.data["scan_count"] == 5

    @pytest.mark.asyncio
    async def test_increment_unknown(self, qr_repository: QRCodeRepository):
        result = await qr_repository.increment_scan_count(str(uuid.uuid4()))

        assert result.is_not_found

    @pytest.mark.asyncio
    async def test_concurrent_increments_are_not_lost(self, file_engine):
        """Simultaneous scans on separate connections all land in the stored count."""
        scans = 8
        session_factory = async_sessionmaker(bind=file_engine, class_=AsyncSession, expire_on_commit=False)

        async with session_factory() as session:
            await ensure_demo_user(session)
            property_obj = await PropertyFactory.create_property(PropertyRepository(session), get_demo_user_id())
            item = await ItemFactory.create_item(ItemRepository(session), property_obj.id)
            qr_code = await QRCodeFactory.create_qr_code(QRCodeRepository(session), item.id)
            qr_id = qr_code.qr_id

        async def scan():
            async with session_factory() as session:
                return await QRCodeRepository(session).increment_scan_count(qr_id)

        results = await asyncio.gather(*(scan() for _ in range(scans)))

        assert all(result.success for result in results)
        assert sorted(result.data["scan_count"] for result in results) == list(range(1, scans + 1))

        async with session_factory() as session:
            stored = await QRCodeRepository(session).get_qr_mapping_by_qr_id(qr_id)
        assert stored.data.scan_count == scans

    @pytest.mark.asyncio
    async def test_inactive_code_is_not_counted(self, qr_repository: QRCodeRepository, test_qr_code: QRCode):
        await qr_repository.update_qr_status(test_qr_code.qr_id, "inactive")

        result = await qr_repository.get_qr_mapping_by_qr_id(test_qr_code.qr_id, record_scan=True)

        assert result.success
        assert result.data.scan_count == 0
        assert result.extra["scan_recorded"] is False

    @pytest.mark.asyncio
    async def test_update_status_reports_previous(self, qr_repository: QRCodeRepository, test_qr_code: QRCode):
        result = await qr_repository.update_qr_status(test_qr_code.qr_id, QRStatus.INACTIVE)

        assert result.success
        assert result.data.status == QRStatus.INACTIVE
        assert result.extra["previous_status"] == "active"

    @pytest.mark.asyncio
    async def test_update_status_same_value_conflicts(
        self,
        qr_repository: QRCodeRepository,
        test_qr_code: QRCode
    ):
        result = await qr_repository.update_qr_status(test_qr_code.qr_id, "active")

        assert result.code == ResultCode.CONFLICT
        assert result.error == "QR code is already active"

    @pytest.mark.asyncio
    async def test_update_status_invalid_value(self, qr_repository: QRCodeRepository, test_qr_code: QRCode):
        result = await qr_repository.update_qr_status(test_qr_code.qr_id, "expired")

        assert result.code == ResultCode.VALIDATION_ERROR
        assert result.error == "Status must be one of: active, inactive"

    @pytest.mark.asyncio
    async def test_delete_mapping(self, qr_repository: QRCodeRepository, test_qr_code: QRCode):
        result = await qr_repository.delete_qr_mapping(test_qr_code.qr_id)

        assert result.success
        assert result.data.qr_id == test_qr_code.qr_id
        assert "deleted_at" in result.extra
        assert (await qr_repository.get_qr_mapping_by_qr_id(test_qr_code.qr_id)).is_not_found

    @pytest.mark.asyncio
    async def test_list_by_property_and_user(
        self,
        qr_repository: QRCodeRepository,
        item_repository: ItemRepository,
        test_qr_code: QRCode,
        foreign_qr_code: QRCode,
        test_property: Property,
        demo_user: DemoUser
    ):
        other_item = await ItemFactory.create_item(item_repository, test_property.id, name="Washer")
        other_code = await QRCodeFactory.create_qr_code(qr_repository, other_item.id)

        by_property = await qr_repository.get_qr_codes_by_property_id(test_property.id)
        by_user = await qr_repository.get_qr_codes_by_user_id(demo_user.id)

        expected = {test_qr_code.qr_id, other_code.qr_id}
        assert {qr.qr_id for qr in by_property.data} == expected
        assert {qr.qr_id for qr in by_user.data} == expected

    @pytest.mark.asyncio
    async def test_statistics(self, qr_repository: QRCodeRepository, test_qr_code: QRCode, test_item: Item):
        quiet = await QRCodeFactory.create_qr_code(qr_repository, test_item.id)
        for _ in range(3):
            await qr_repository.increment_scan_count(test_qr_code.qr_id)
        await qr_repository.update_qr_status(quiet.qr_id, "inactive")

        result = await qr_repository.get_qr_statistics(item_id=test_item.id)
        stats = result.data

        assert stats["total_qr_codes"] == 2
        assert stats["active_qr_codes"] == 1
        assert stats["inactive_qr_codes"] == 1
        assert stats["total_scans"] == 3
        assert stats["average_scans"] == 1.5
        assert stats["most_scanned"]["qr_id"] == test_qr_code.qr_id
        assert stats["most_scanned"]["item_name"] == "Coffee Maker"
        assert stats["least_scanned"]["qr_id"] == quiet.qr_id

    @pytest.mark.asyncio
    async def test_statistics_requires_scope(self, qr_repository: QRCodeRepository):
        result = await qr_repository.get_qr_statistics()

        assert result.code == ResultCode.VALIDATION_ERROR

    def test_summary_of_nothing(self):
        stats = summarize_qr_codes([])

        assert stats["total_qr_codes"] == 0
        assert stats["average_scans"] == 0
        assert stats["most_scanned"] is None
        assert stats["least_scanned"] is None
