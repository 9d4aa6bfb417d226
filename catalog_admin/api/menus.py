"""Menu API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from catalog_admin.api.auth import require_auth
from catalog_admin.core.dependencies import get_catalog_repository, get_synchronizer
from catalog_admin.services.catalog.commands import (
    DeleteMenuCommand,
    ReorderMenusCommand,
    SetMenuCategoriesCommand,
)
from catalog_admin.services.catalog.models import Menu, MenuCreate, MenuType, MenuUpdate
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.synchronizer import CascadeResult, ReferenceSynchronizer

router = APIRouter(dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)


class CategoryIds(BaseModel):
    category_ids: List[str]


class MenuIds(BaseModel):
    menu_ids: List[str]


class ActiveToggle(BaseModel):
    is_active: bool


@router.get("/api/menus", response_model=List[Menu])
async def list_menus(
    type: Optional[MenuType] = None,
    active_only: bool = False,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    return await repository.list_menus(type, active_only)


# Registered before /api/menus/{menu_id} routes so "order" is not taken as an id
@router.put("/api/menus/order", response_model=List[Menu])
async def reorder_menus(body: MenuIds, synchronizer: ReferenceSynchronizer = Depends(get_synchronizer)):
    """Assign menu display order by position in the request."""
    return await synchronizer.dispatch(ReorderMenusCommand(menu_ids=body.menu_ids))


@router.get("/api/menus/{menu_id}", response_model=Menu)
async def get_menu(menu_id: str, repository: CatalogRepository = Depends(get_catalog_repository)):
    return await repository.get_menu(menu_id)


@router.post("/api/menus", response_model=Menu, status_code=201)
async def create_menu(menu_in: MenuCreate, repository: CatalogRepository = Depends(get_catalog_repository)):
    menu = await repository.add_menu(menu_in)
    logger.info(f"[MENUS] Created {menu.type} menu {menu.id} ({menu.name})")
    return menu


@router.patch("/api/menus/{menu_id}", response_model=Menu)
async def update_menu(
    menu_id: str,
    menu_in: MenuUpdate,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    menu = await repository.update_menu(menu_id, menu_in)
    logger.info(f"[MENUS] Updated menu {menu_id}")
    return menu


@router.put("/api/menus/{menu_id}/categories", response_model=Menu)
async def set_menu_categories(
    menu_id: str,
    body: CategoryIds,
    synchronizer: ReferenceSynchronizer = Depends(get_synchronizer),
):
    """Replace the menu's ordered category list."""
    return await synchronizer.dispatch(
        SetMenuCategoriesCommand(menu_id=menu_id, category_ids=body.category_ids)
    )


@router.put("/api/menus/{menu_id}/active", response_model=Menu)
async def set_menu_active(
    menu_id: str,
    toggle: ActiveToggle,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    return await repository.set_menu_active(menu_id, toggle.is_active)


@router.delete("/api/menus/{menu_id}", response_model=CascadeResult)
async def delete_menu(menu_id: str, synchronizer: ReferenceSynchronizer = Depends(get_synchronizer)):
    """Delete an unpublished menu and its translations."""
    return await synchronizer.dispatch(DeleteMenuCommand(menu_id=menu_id))
