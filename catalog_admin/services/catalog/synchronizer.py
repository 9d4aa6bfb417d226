"""Reference synchronizer.

Applies relationship mutations between menus, categories and items. Each
public method reads the current state, computes every write needed to keep
both sides of a reference consistent, validates the result and commits it
as one batch. A failure before the commit leaves the store untouched.

Items and categories are one-to-many: ``Item.category`` and
``Category.items`` always agree. Menus and categories are many-to-many, so
only the menu side (``Menu.categories``) is stored.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from catalog_admin.core.errors import ConflictError
from catalog_admin.services.catalog.commands import (
    CatalogCommand,
    DeleteCategoryCommand,
    DeleteItemCommand,
    DeleteMenuCommand,
    ReorderItemsCommand,
    ReorderMenusCommand,
    SetCategoryItemsCommand,
    SetItemCategoryCommand,
    SetMenuCategoriesCommand,
)
from catalog_admin.services.catalog.models import CATEGORIES, ITEMS, MENUS, Category, Item, Menu
from catalog_admin.services.catalog.ordering import OrderManager, next_order
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.validation import validate_ids
from catalog_admin.services.translations.alignment import stage_delete_translations

logger = logging.getLogger(__name__)


class CascadeResult(BaseModel):
    """Summary of a cascading delete."""

    deleted: str
    collection: str
    items_cleared: List[str] = []
    categories_updated: List[str] = []
    menus_updated: List[str] = []
    translations_deleted: int = 0


class ReferenceSynchronizer:
    """Keeps menu, category and item references consistent."""

    def __init__(self, repository: CatalogRepository, order_manager: Optional[OrderManager] = None):
        self.repository = repository
        self.order_manager = order_manager or OrderManager(repository)

    async def dispatch(self, command: CatalogCommand) -> Any:
        """Single entry point for typed catalog commands."""
        if isinstance(command, SetItemCategoryCommand):
            return await self.set_item_category(
                command.item_id, command.category_id, command.expected_category
            )
        if isinstance(command, SetCategoryItemsCommand):
            return await self.set_category_items(command.category_id, command.item_ids)
        if isinstance(command, SetMenuCategoriesCommand):
            return await self.set_menu_categories(command.menu_id, command.category_ids)
        if isinstance(command, ReorderItemsCommand):
            return await self.order_manager.reorder_items(command.category_id, command.item_ids)
        if isinstance(command, ReorderMenusCommand):
            return await self.order_manager.reorder_menus(command.menu_ids)
        if isinstance(command, DeleteItemCommand):
            return await self.delete_item(command.item_id)
        if isinstance(command, DeleteCategoryCommand):
            return await self.delete_category(command.category_id)
        if isinstance(command, DeleteMenuCommand):
            return await self.delete_menu(command.menu_id)
        raise TypeError(f"Unsupported command: {type(command).__name__}")

    async def set_item_category(
        self,
        item_id: str,
        category_id: str,
        expected_category: Optional[str] = None,
    ) -> Item:
        """Move an item into ``category_id`` (or out of any category with ``""``).

        When ``expected_category`` is given, the move only happens if the
        item still belongs to it; otherwise ConflictError is raised.
        """
        repository = self.repository
        repository.require_operator()

        item = await repository.get_item(item_id)
        new_category = await repository.get_category(category_id) if category_id else None
        if expected_category is not None and item.category != expected_category:
            raise ConflictError(
                f"Item '{item_id}' belongs to '{item.category}', expected '{expected_category}'"
            )

        now = repository.now()
        batch = repository.store.batch()
        old_category_id = item.category
        touched_categories = set()

        for category in await repository.categories_listing(item_id):
            if new_category is not None and category.id == new_category.id:
                continue
            category.items = [member for member in category.items if member != item_id]
            category.updated_at = now
            repository.stage_category(batch, category)
            touched_categories.add(category.id)

        if new_category is not None and item_id not in new_category.items:
            new_category.items = new_category.items + [item_id]
            new_category.updated_at = now
            repository.stage_category(batch, new_category)
            touched_categories.add(new_category.id)

        if old_category_id != category_id:
            if new_category is not None:
                members = await repository.list_items(new_category.id)
                item.order = next_order(member.order for member in members if member.id != item_id)
            item.category = category_id
            item.updated_at = now
            repository.stage_item(batch, item)

        if not len(batch):
            return item

        await repository.stage_touch_menus(
            batch, touched_categories | {old_category_id, category_id}, now
        )
        await batch.commit()
        logger.info(
            f"[SYNC] Item {item_id} category '{old_category_id}' -> '{category_id}'"
        )
        return item

    async def set_category_items(self, category_id: str, item_ids: List[str]) -> Category:
        """Replace a category's item list and update each item's pointer.

        Items dropped from the list are only cleared if they still point at
        this category, so a concurrent move elsewhere is not clobbered.
        """
        repository = self.repository
        repository.require_operator()
        validate_ids("item_ids", item_ids)

        category = await repository.get_category(category_id)
        items = await repository.get_items(item_ids)

        now = repository.now()
        batch = repository.store.batch()
        other_categories: Dict[str, Category] = {}

        for position, item in enumerate(items):
            changed = False
            for other in await repository.categories_listing(item.id):
                if other.id == category_id:
                    continue
                other = other_categories.setdefault(other.id, other)
                other.items = [member for member in other.items if member != item.id]
            if item.category != category_id:
                item.category = category_id
                changed = True
            if item.order != position:
                item.order = position
                changed = True
            if changed:
                item.updated_at = now
                repository.stage_item(batch, item)

        wanted = set(item_ids)
        for removed_id in category.items:
            if removed_id in wanted:
                continue
            item = await repository.find_item(removed_id)
            if item is None:
                continue
            if item.category == category_id:
                item.category = ""
                item.updated_at = now
                repository.stage_item(batch, item)
            else:
                logger.info(
                    f"[SYNC] Item {removed_id} already moved to '{item.category}', leaving it"
                )

        for other in other_categories.values():
            other.updated_at = now
            repository.stage_category(batch, other)

        if category.items != item_ids:
            category.items = list(item_ids)
            category.updated_at = now
            repository.stage_category(batch, category)

        if not len(batch):
            return category

        await repository.stage_touch_menus(batch, [category_id, *other_categories], now)
        await batch.commit()
        logger.info(f"[SYNC] Category {category_id} now lists {len(item_ids)} item(s)")
        return category

    async def set_menu_categories(self, menu_id: str, category_ids: List[str]) -> Menu:
        """Replace a menu's ordered category list."""
        repository = self.repository
        repository.require_operator()
        validate_ids("category_ids", category_ids)

        menu = await repository.get_menu(menu_id)
        await repository.get_categories(category_ids)
        if menu.categories == category_ids:
            return menu

        menu.categories = list(category_ids)
        menu.updated_at = repository.now()
        batch = repository.store.batch()
        repository.stage_menu(batch, menu)
        await batch.commit()
        logger.info(f"[SYNC] Menu {menu_id} now lists {len(category_ids)} category(ies)")
        return menu

    async def delete_category(self, category_id: str) -> CascadeResult:
        """Delete a category, clearing every item and menu reference to it."""
        repository = self.repository
        repository.require_operator()
        await repository.get_category(category_id)

        now = repository.now()
        batch = repository.store.batch()
        result = CascadeResult(deleted=category_id, collection=CATEGORIES)

        for item in await repository.list_items(category_id):
            item.category = ""
            item.updated_at = now
            repository.stage_item(batch, item)
            result.items_cleared.append(item.id)

        for menu in await repository.menus_containing(category_id):
            menu.categories = [c for c in menu.categories if c != category_id]
            menu.updated_at = now
            repository.stage_menu(batch, menu)
            result.menus_updated.append(menu.id)

        result.translations_deleted = await stage_delete_translations(
            repository.store, batch, CATEGORIES, category_id
        )
        batch.delete(CATEGORIES, category_id)
        await batch.commit()
        logger.info(
            f"[SYNC] Deleted category {category_id}: cleared {len(result.items_cleared)} item(s), "
            f"updated {len(result.menus_updated)} menu(s)"
        )
        return result

    async def delete_item(self, item_id: str) -> CascadeResult:
        """Delete an item and remove it from every category listing it."""
        repository = self.repository
        repository.require_operator()
        item = await repository.get_item(item_id)

        now = repository.now()
        batch = repository.store.batch()
        result = CascadeResult(deleted=item_id, collection=ITEMS)

        for category in await repository.categories_listing(item_id):
            category.items = [member for member in category.items if member != item_id]
            category.updated_at = now
            repository.stage_category(batch, category)
            result.categories_updated.append(category.id)

        touched = await repository.stage_touch_menus(
            batch, [item.category, *result.categories_updated], now
        )
        result.menus_updated = sorted(touched)
        result.translations_deleted = await stage_delete_translations(
            repository.store, batch, ITEMS, item_id
        )
        batch.delete(ITEMS, item_id)
        await batch.commit()
        logger.info(f"[SYNC] Deleted item {item_id} from {len(result.categories_updated)} category(ies)")
        return result

    async def delete_menu(self, menu_id: str) -> CascadeResult:
        """Delete a menu. Published menus must be unpublished first."""
        repository = self.repository
        repository.require_operator()
        menu = await repository.get_menu(menu_id)
        if menu.publish_status == "published":
            raise ConflictError(f"Menu '{menu_id}' is published; unpublish it before deleting")

        batch = repository.store.batch()
        result = CascadeResult(deleted=menu_id, collection=MENUS)
        result.translations_deleted = await stage_delete_translations(
            repository.store, batch, MENUS, menu_id
        )
        batch.delete(MENUS, menu_id)
        await batch.commit()
        logger.info(f"[SYNC] Deleted menu {menu_id}")
        return result
