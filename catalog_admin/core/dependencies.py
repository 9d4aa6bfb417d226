"""FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_admin.api.auth import get_auth_context
from catalog_admin.core.config import settings
from catalog_admin.core.context import AuthContext
from catalog_admin.db.database import get_db
from catalog_admin.services.catalog.ordering import OrderManager
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.synchronizer import ReferenceSynchronizer
from catalog_admin.services.publishing.service import PublicationService
from catalog_admin.services.publishing.snapshot import ContactInfo, SnapshotGenerator, SnapshotRestaurant
from catalog_admin.services.publishing.storage import ArtifactStorage, LocalArtifactStorage
from catalog_admin.services.store.base import DocumentStore
from catalog_admin.services.store.sql import SqlDocumentStore
from catalog_admin.services.translations.service import TranslationService


def get_document_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    """Get document store instance."""
    return SqlDocumentStore(db)


def get_artifact_storage() -> ArtifactStorage:
    """Get artifact storage instance."""
    return LocalArtifactStorage(settings.artifact_dir, settings.public_base_url)


def get_catalog_repository(
    store: DocumentStore = Depends(get_document_store),
    auth: AuthContext = Depends(get_auth_context),
) -> CatalogRepository:
    return CatalogRepository(store, auth)


def get_order_manager(
    repository: CatalogRepository = Depends(get_catalog_repository),
) -> OrderManager:
    return OrderManager(repository)


def get_synchronizer(
    repository: CatalogRepository = Depends(get_catalog_repository),
    order_manager: OrderManager = Depends(get_order_manager),
) -> ReferenceSynchronizer:
    return ReferenceSynchronizer(repository, order_manager)


def get_restaurant() -> SnapshotRestaurant:
    """Restaurant header embedded in published artifacts."""
    return SnapshotRestaurant(
        name=settings.restaurant_name,
        description=settings.restaurant_description,
        contact_info=ContactInfo(
            email=settings.restaurant_email,
            phone=settings.restaurant_phone,
            address=settings.restaurant_address,
        ),
    )


def get_publication_service(
    repository: CatalogRepository = Depends(get_catalog_repository),
    storage: ArtifactStorage = Depends(get_artifact_storage),
) -> PublicationService:
    generator = SnapshotGenerator(
        repository,
        restaurant=get_restaurant(),
        default_language=settings.default_language,
        supported_languages=settings.supported_languages,
    )
    return PublicationService(repository, generator, storage)


def get_translation_service(
    repository: CatalogRepository = Depends(get_catalog_repository),
) -> TranslationService:
    return TranslationService(repository, settings.supported_languages)
