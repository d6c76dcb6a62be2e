"""
Test configuration and fixtures for the QR Instruct API.
Provides an in-memory database, the seeded demo user, data factories and an
async HTTP client bound to the application.
"""

import os

# Configure settings before the application is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("FRONTEND_BASE_URL", "http://localhost:3000")

import pytest
import uuid
from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from qrinstruct.main import app
from qrinstruct.database import Base, get_db, enable_sqlite_foreign_keys
from qrinstruct.models.user import User
from qrinstruct.models.property import Property, PropertyType
from qrinstruct.models.item import Item, MediaType
from qrinstruct.models.qr_code import QRCode
from qrinstruct.repositories.user import UserRepository
from qrinstruct.repositories.property import PropertyRepository
from qrinstruct.repositories.item import ItemRepository
from qrinstruct.repositories.qr_code import QRCodeRepository
from qrinstruct.services.demo_user import DemoUser, get_demo_user, ensure_demo_user
from qrinstruct.services.qr_generator import QRGenerator
from qrinstruct.services.property import PropertyService
from qrinstruct.services.item import ItemService
from qrinstruct.services.qr_code import QRCodeService
from qrinstruct.services.content import ContentService


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test, with foreign keys enforced."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def file_engine(tmp_path):
    """
    File-backed database shared by several connections, for concurrency tests.
    Each transaction starts with BEGIN IMMEDIATE so writers queue on the lock
    (up to the busy timeout) instead of failing with "database is locked".
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'qrinstruct.db'}",
        echo=False,
        connect_args={"timeout": 30}
    )
    enable_sqlite_foreign_keys(engine)

    @event.listens_for(engine.sync_engine, "connect")
    def _manual_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session with the demo user already seeded."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with session_factory() as session:
        await ensure_demo_user(session)
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Identity fixtures
@pytest.fixture
def demo_user() -> DemoUser:
    return get_demo_user()


@pytest.fixture
async def other_user(user_repository: UserRepository) -> DemoUser:
    """A second account that owns nothing the demo user can touch."""
    user = await UserFactory.create_user(user_repository)
    return DemoUser(id=user.id, email=user.email, name=user.name)


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def item_repository(db_session: AsyncSession) -> ItemRepository:
    return ItemRepository(db_session)


@pytest.fixture
def qr_repository(db_session: AsyncSession) -> QRCodeRepository:
    return QRCodeRepository(db_session)


# Service fixtures
@pytest.fixture
def generator() -> QRGenerator:
    return QRGenerator(frontend_base_url="http://localhost:3000")


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyService:
    return PropertyService(db_session)


@pytest.fixture
def item_service(db_session: AsyncSession) -> ItemService:
    return ItemService(db_session)


@pytest.fixture
def qr_service(db_session: AsyncSession, generator: QRGenerator) -> QRCodeService:
    return QRCodeService(db_session, generator=generator)


@pytest.fixture
def content_service(db_session: AsyncSession, generator: QRGenerator) -> ContentService:
    return ContentService(db_session, generator=generator)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = "other.owner@qrinstruct.com",
        name: str = "Other Owner"
    ) -> User:
        result = await user_repo.ensure_user(user_id=uuid.uuid4(), email=email, name=name)
        assert result.success, result.error
        return result.data


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        name: str = "Sunset Apt",
        description: Optional[str] = "Two bedroom apartment by the beach",
        address: Optional[str] = "12 Ocean Drive",
        property_type: PropertyType = PropertyType.APARTMENT,
        settings: Optional[dict] = None
    ) -> dict:
        return {
            "name": name,
            "description": description,
            "address": address,
            "property_type": property_type,
            "settings": settings or {},
        }

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        user_id: uuid.UUID,
        **overrides
    ) -> Property:
        """Create a test property in the database."""
        result = await property_repo.create_property(
            user_id,
            PropertyFactory.create_property_data(**overrides)
        )
        assert result.success, result.error
        return result.data


class ItemFactory:
    """Factory for creating test items."""

    @staticmethod
    def create_item_data(
        name: str = "Coffee Maker",
        description: Optional[str] = "Fill the tank, insert a pod, press brew.",
        location: Optional[str] = "Kitchen",
        media_url: Optional[str] = None,
        media_type: MediaType = MediaType.TEXT,
        metadata: Optional[dict] = None
    ) -> dict:
        return {
            "name": name,
            "description": description,
            "location": location,
            "media_url": media_url,
            "media_type": media_type,
            "metadata": metadata or {},
        }

    @staticmethod
    async def create_item(item_repo: ItemRepository, property_id: uuid.UUID, **overrides) -> Item:
        result = await item_repo.create_item(property_id, ItemFactory.create_item_data(**overrides))
        assert result.success, result.error
        return result.data


class QRCodeFactory:
    """Factory for QR code mappings created without rendering an image."""

    @staticmethod
    async def create_qr_code(qr_repo: QRCodeRepository, item_id: uuid.UUID) -> QRCode:
        qr_id = str(uuid.uuid4())
        result = await qr_repo.create_qr_mapping(
            item_id,
            qr_id,
            {"content_url": f"http://localhost:3000/content/{qr_id}"}
        )
        assert result.success, result.error
        return result.data


# Common test fixtures
@pytest.fixture
async def test_property(property_repository: PropertyRepository, demo_user: DemoUser) -> Property:
    """A property owned by the demo user."""
    return await PropertyFactory.create_property(property_repository, demo_user.id)


@pytest.fixture
async def test_item(item_repository: ItemRepository, test_property: Property) -> Item:
    return await ItemFactory.create_item(item_repository, test_property.id)


@pytest.fixture
async def test_qr_code(qr_repository: QRCodeRepository, test_item: Item) -> QRCode:
    return await QRCodeFactory.create_qr_code(qr_repository, test_item.id)


@pytest.fixture
async def foreign_property(property_repository: PropertyRepository, other_user: DemoUser) -> Property:
    """A property owned by someone other than the demo user."""
    return await PropertyFactory.create_property(
        property_repository,
        other_user.id,
        name="Someone Else's Cabin",
        property_type=PropertyType.HOUSE
    )


@pytest.fixture
async def foreign_item(item_repository: ItemRepository, foreign_property: Property) -> Item:
    return await ItemFactory.create_item(item_repository, foreign_property.id, name="Wood Stove")


@pytest.fixture
async def foreign_qr_code(qr_repository: QRCodeRepository, foreign_item: Item) -> QRCode:
    return await QRCodeFactory.create_qr_code(qr_repository, foreign_item.id)


# Utility functions for tests
def assert_error_envelope(body: dict, code: str, error: Optional[str] = None):
    """Assert the shape shared by every error response."""
    assert body["success"] is False
    assert body["code"] == code
    assert isinstance(body["message"], str)
    if error is not None:
        assert body["error"] == error
