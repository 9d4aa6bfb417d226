"""Shared test fixtures and configuration."""
import pytest
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ADMIN_PASSWORD", "testpass123")

from catalog_admin.main import app
from catalog_admin.core.config import Settings
from catalog_admin.core.context import AuthContext
from catalog_admin.core.dependencies import get_artifact_storage, get_document_store
from catalog_admin.db.database import get_db
from catalog_admin.db.models import Base
from catalog_admin.services.catalog.ordering import OrderManager
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.synchronizer import ReferenceSynchronizer
from catalog_admin.services.publishing import service as publishing_service
from catalog_admin.services.publishing.service import PublicationService
from catalog_admin.services.publishing.snapshot import ContactInfo, SnapshotGenerator, SnapshotRestaurant
from catalog_admin.services.publishing.storage import InMemoryArtifactStorage
from catalog_admin.services.store.in_memory import InMemoryDocumentStore
from catalog_admin.services.store.seed import load_seed, seed_store
from catalog_admin.services.translations.service import TranslationService


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_LANGUAGES = ["es", "de"]


class FakeClock:
    """Clock advancing one second on every reading."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def test_settings():
    """Override settings for testing."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        admin_password="testpass123",
        restaurant_name="Test Restaurant",
        restaurant_email="hello@test.example",
        supported_languages=TEST_LANGUAGES,
    )


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(test_db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def seed_path():
    """Return path to the test catalog YAML file."""
    return Path(__file__).parent / "fixtures" / "catalog.yaml"


@pytest.fixture
async def store(seed_path):
    """In-memory document store seeded with the test catalog."""
    document_store = InMemoryDocumentStore()
    await seed_store(document_store, load_seed(seed_path))
    return document_store


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(store, clock):
    """Catalog repository acting as an authenticated operator."""
    return CatalogRepository(store, AuthContext.operator_session(), clock)


@pytest.fixture
def anonymous_repository(store, clock):
    return CatalogRepository(store, AuthContext.anonymous(), clock)


@pytest.fixture
def order_manager(repository):
    return OrderManager(repository)


@pytest.fixture
def synchronizer(repository, order_manager):
    return ReferenceSynchronizer(repository, order_manager)


@pytest.fixture
def artifact_storage():
    return InMemoryArtifactStorage()


@pytest.fixture
def restaurant():
    return SnapshotRestaurant(
        name="Test Restaurant",
        contact_info=ContactInfo(email="hello@test.example"),
    )


@pytest.fixture
def generator(repository, restaurant, clock):
    return SnapshotGenerator(
        repository,
        restaurant=restaurant,
        default_language="en",
        supported_languages=TEST_LANGUAGES,
        clock=clock,
    )


@pytest.fixture
def publication_service(repository, generator, artifact_storage):
    return PublicationService(repository, generator, artifact_storage)


@pytest.fixture
def translation_service(repository):
    return TranslationService(repository, TEST_LANGUAGES)


@pytest.fixture(autouse=True)
def clean_publish_locks():
    """Drop per-menu publish locks between tests."""
    publishing_service._publish_locks.clear()
    yield
    publishing_service._publish_locks.clear()


@pytest.fixture
def override_get_db(test_db):
    """Override get_db dependency with test database."""
    async def _override_get_db():
        yield test_db
    return _override_get_db


@pytest.fixture
def test_client(override_get_db, store, artifact_storage, test_settings, monkeypatch):
    """Create FastAPI test client with overrides."""
    # Override dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_artifact_storage] = lambda: artifact_storage

    # Override settings in modules that use it
    monkeypatch.setattr("catalog_admin.core.config.settings", test_settings)
    monkeypatch.setattr("catalog_admin.api.auth.settings", test_settings)
    monkeypatch.setattr("catalog_admin.core.dependencies.settings", test_settings)

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def authenticated_client(test_client, test_settings):
    """Create test client with valid session cookie."""
    response = test_client.post(
        "/api/auth/login",
        json={"password": test_settings.admin_password}
    )
    assert response.status_code == 200

    # Session cookie is automatically stored in test_client
    return test_client


@pytest.fixture
def clean_auth_sessions():
    """Clean up authentication sessions before and after tests."""
    from catalog_admin.api import auth
    auth._sessions.clear()
    yield
    auth._sessions.clear()
