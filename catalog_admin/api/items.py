"""Item API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from catalog_admin.api.auth import require_auth
from catalog_admin.core.dependencies import get_catalog_repository, get_synchronizer
from catalog_admin.services.catalog.commands import DeleteItemCommand, SetItemCategoryCommand
from catalog_admin.services.catalog.models import Item, ItemCreate, ItemUpdate
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.synchronizer import CascadeResult, ReferenceSynchronizer

router = APIRouter(dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)


class CategoryAssignment(BaseModel):
    """Target category of an item; empty string removes it from any category."""
    category_id: str = ""
    expected_category: Optional[str] = None


class ActiveToggle(BaseModel):
    active: bool


@router.get("/api/items", response_model=List[Item])
async def list_items(
    category_id: Optional[str] = None,
    active_only: bool = False,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """List items, optionally limited to one category."""
    items = await repository.list_items(category_id, active_only)
    logger.debug(f"[ITEMS] Listed {len(items)} items (category={category_id})")
    return items


@router.get("/api/items/{item_id}", response_model=Item)
async def get_item(item_id: str, repository: CatalogRepository = Depends(get_catalog_repository)):
    return await repository.get_item(item_id)


@router.post("/api/items", response_model=Item, status_code=201)
async def create_item(item_in: ItemCreate, repository: CatalogRepository = Depends(get_catalog_repository)):
    """Add an item, appending it to its category if one is given."""
    item = await repository.add_item(item_in)
    logger.info(f"[ITEMS] Created item {item.id} ({item.name})")
    return item


@router.patch("/api/items/{item_id}", response_model=Item)
async def update_item(
    item_id: str,
    item_in: ItemUpdate,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    item = await repository.update_item(item_id, item_in)
    logger.info(f"[ITEMS] Updated item {item_id}")
    return item


@router.put("/api/items/{item_id}/category", response_model=Item)
async def set_item_category(
    item_id: str,
    assignment: CategoryAssignment,
    synchronizer: ReferenceSynchronizer = Depends(get_synchronizer),
):
    """Move an item between categories, keeping both sides of the link in sync."""
    return await synchronizer.dispatch(
        SetItemCategoryCommand(
            item_id=item_id,
            category_id=assignment.category_id,
            expected_category=assignment.expected_category,
        )
    )


@router.put("/api/items/{item_id}/active", response_model=Item)
async def set_item_active(
    item_id: str,
    toggle: ActiveToggle,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    return await repository.set_item_active(item_id, toggle.active)


@router.delete("/api/items/{item_id}", response_model=CascadeResult)
async def delete_item(item_id: str, synchronizer: ReferenceSynchronizer = Depends(get_synchronizer)):
    """Delete an item and drop it from every category listing it."""
    return await synchronizer.dispatch(DeleteItemCommand(item_id=item_id))
