"""Publishing API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from catalog_admin.api.auth import require_auth
from catalog_admin.core.dependencies import get_document_store, get_publication_service
from catalog_admin.core.errors import NotFoundError
from catalog_admin.services.catalog.models import MenuType
from catalog_admin.services.publishing.service import (
    MenuPublicationStatus,
    PublicationService,
    PublishResult,
)
from catalog_admin.services.publishing.snapshot import artifact_path
from catalog_admin.services.publishing.website import WebsiteConfig, get_website_config
from catalog_admin.services.store.base import DocumentStore

router = APIRouter(dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)


@router.get("/api/publishing/menus", response_model=List[MenuPublicationStatus])
async def list_publication_statuses(
    type: Optional[MenuType] = None,
    service: PublicationService = Depends(get_publication_service),
):
    """Publish state of every menu, including derived staleness."""
    return await service.list_statuses(type)


@router.get("/api/publishing/menus/{menu_id}", response_model=MenuPublicationStatus)
async def get_publication_status(
    menu_id: str,
    service: PublicationService = Depends(get_publication_service),
):
    return await service.status(menu_id)


@router.post("/api/publishing/menus/{menu_id}/publish", response_model=PublishResult)
async def publish_menu(menu_id: str, service: PublicationService = Depends(get_publication_service)):
    logger.info(f"[PUBLISH] Publish requested for menu {menu_id}")
    return await service.publish(menu_id)


@router.post("/api/publishing/menus/{menu_id}/update", response_model=PublishResult)
async def update_published_menu(menu_id: str, service: PublicationService = Depends(get_publication_service)):
    logger.info(f"[PUBLISH] Update requested for menu {menu_id}")
    return await service.update(menu_id)


@router.post("/api/publishing/menus/{menu_id}/unpublish", response_model=PublishResult)
async def unpublish_menu(menu_id: str, service: PublicationService = Depends(get_publication_service)):
    logger.info(f"[PUBLISH] Unpublish requested for menu {menu_id}")
    return await service.unpublish(menu_id)


@router.get("/api/publishing/menus/{menu_id}/artifact")
async def get_published_artifact(menu_id: str, service: PublicationService = Depends(get_publication_service)):
    """The currently stored artifact of a published menu."""
    artifact = await service.get_artifact(menu_id)
    if artifact is None:
        raise NotFoundError("artifacts", artifact_path(menu_id))
    return artifact


@router.get("/api/publishing/website", response_model=WebsiteConfig)
async def get_website(store: DocumentStore = Depends(get_document_store)):
    return await get_website_config(store)
