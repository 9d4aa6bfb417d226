"""Category API endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from catalog_admin.api.auth import require_auth
from catalog_admin.core.dependencies import (
    get_catalog_repository,
    get_order_manager,
    get_synchronizer,
)
from catalog_admin.services.catalog.commands import (
    DeleteCategoryCommand,
    ReorderItemsCommand,
    SetCategoryItemsCommand,
)
from catalog_admin.services.catalog.models import Category, CategoryCreate, CategoryUpdate, Item
from catalog_admin.services.catalog.ordering import OrderManager
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.synchronizer import CascadeResult, ReferenceSynchronizer

router = APIRouter(dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)


class ItemIds(BaseModel):
    item_ids: List[str]


@router.get("/api/categories", response_model=List[Category])
async def list_categories(repository: CatalogRepository = Depends(get_catalog_repository)):
    return await repository.list_categories()


@router.get("/api/categories/{category_id}", response_model=Category)
async def get_category(category_id: str, repository: CatalogRepository = Depends(get_catalog_repository)):
    return await repository.get_category(category_id)


@router.get("/api/categories/{category_id}/items", response_model=List[Item])
async def list_category_items(
    category_id: str,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Items of a category in display order."""
    await repository.get_category(category_id)
    return await repository.list_items(category_id)


@router.post("/api/categories", response_model=Category, status_code=201)
async def create_category(
    category_in: CategoryCreate,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    category = await repository.add_category(category_in)
    logger.info(f"[CATEGORIES] Created category {category.id} ({category.name})")
    return category


@router.patch("/api/categories/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    category = await repository.update_category(category_id, category_in)
    logger.info(f"[CATEGORIES] Updated category {category_id}")
    return category


@router.put("/api/categories/{category_id}/items", response_model=Category)
async def set_category_items(
    category_id: str,
    body: ItemIds,
    synchronizer: ReferenceSynchronizer = Depends(get_synchronizer),
):
    """Replace the category's item list and re-point the affected items."""
    return await synchronizer.dispatch(
        SetCategoryItemsCommand(category_id=category_id, item_ids=body.item_ids)
    )


@router.put("/api/categories/{category_id}/order", response_model=List[Item])
async def reorder_items(
    category_id: str,
    body: ItemIds,
    synchronizer: ReferenceSynchronizer = Depends(get_synchronizer),
):
    """Assign item display order by position in the request."""
    return await synchronizer.dispatch(
        ReorderItemsCommand(category_id=category_id, item_ids=body.item_ids)
    )


@router.post("/api/categories/{category_id}/order/normalize", response_model=List[Item])
async def normalize_item_orders(
    category_id: str,
    order_manager: OrderManager = Depends(get_order_manager),
):
    """Rewrite item orders as a dense 0..n-1 sequence."""
    return await order_manager.normalize_item_orders(category_id)


@router.delete("/api/categories/{category_id}", response_model=CascadeResult)
async def delete_category(
    category_id: str,
    synchronizer: ReferenceSynchronizer = Depends(get_synchronizer),
):
    """Delete a category, clearing its items and removing it from menus."""
    result = await synchronizer.dispatch(DeleteCategoryCommand(category_id=category_id))
    logger.info(
        f"[CATEGORIES] Deleted category {category_id} - "
        f"{len(result.items_cleared)} items cleared, {len(result.menus_updated)} menus updated"
    )
    return result
