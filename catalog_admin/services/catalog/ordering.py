"""Ordinal assignment for items within a category and menus within a type."""
import logging
from typing import TYPE_CHECKING, Iterable, List

from catalog_admin.services.catalog.models import Item, Menu, MenuType
from catalog_admin.services.catalog.validation import validate_ids

if TYPE_CHECKING:
    from catalog_admin.services.catalog.repository import CatalogRepository

logger = logging.getLogger(__name__)


def next_order(orders: Iterable[int]) -> int:
    """Order for a new member: one past the current maximum, 0 when empty."""
    orders = list(orders)
    return max(orders) + 1 if orders else 0


class OrderManager:
    """Assigns and rewrites ``order`` ordinals."""

    def __init__(self, repository: "CatalogRepository"):
        self.repository = repository

    async def next_item_order(self, category_id: str) -> int:
        members = await self.repository.list_items(category_id)
        return next_order(item.order for item in members)

    async def next_menu_order(self, menu_type: MenuType) -> int:
        siblings = await self.repository.list_menus(menu_type)
        return next_order(menu.order for menu in siblings)

    async def reorder_items(self, category_id: str, item_ids: List[str]) -> List[Item]:
        """Assign orders ``0..n-1`` to a category's items by position.

        Membership is re-read from the store at call time. Ids that are not
        members of the category any more are skipped; members missing from
        ``item_ids`` keep their relative order after the requested ones.
        The category's ``items`` list is rewritten to the same sequence.
        """
        repository = self.repository
        repository.require_operator()
        validate_ids("item_ids", item_ids)

        category = await repository.get_category(category_id)
        members = {item.id: item for item in await repository.list_items(category_id)}

        requested = [item_id for item_id in item_ids if item_id in members]
        skipped = [item_id for item_id in item_ids if item_id not in members]
        if skipped:
            logger.warning(
                f"[ORDER] Skipping {len(skipped)} item(s) no longer in category {category_id}: {skipped}"
            )

        remaining = [
            item_id for item_id in category.items
            if item_id in members and item_id not in requested
        ]
        unlisted = [
            item.id for item in members.values()
            if item.id not in requested and item.id not in remaining
        ]
        sequence = requested + remaining + unlisted

        now = repository.now()
        batch = repository.store.batch()
        for position, item_id in enumerate(sequence):
            item = members[item_id]
            if item.order != position:
                item.order = position
                item.updated_at = now
                repository.stage_item(batch, item)

        if category.items != sequence:
            category.items = sequence
            category.updated_at = now
            repository.stage_category(batch, category)

        if len(batch):
            await repository.stage_touch_menus(batch, [category_id], now)
            await batch.commit()
            logger.info(f"[ORDER] Reordered {len(sequence)} item(s) in category {category_id}")
        return [members[item_id] for item_id in sequence]

    async def normalize_item_orders(self, category_id: str) -> List[Item]:
        """Rewrite item orders from the category's current list position."""
        category = await self.repository.get_category(category_id)
        return await self.reorder_items(category_id, list(category.items))

    async def reorder_menus(self, menu_ids: List[str]) -> List[Menu]:
        """Assign menu orders ``0..n-1`` by position.

        Menu order is a listing concern, not content, so ``updated_at`` is
        left alone and published menus do not turn stale.
        """
        repository = self.repository
        repository.require_operator()
        validate_ids("menu_ids", menu_ids)

        menus = [await repository.get_menu(menu_id) for menu_id in menu_ids]
        batch = repository.store.batch()
        for position, menu in enumerate(menus):
            if menu.order != position:
                menu.order = position
                repository.stage_menu(batch, menu)
        await batch.commit()
        logger.info(f"[ORDER] Reordered {len(menus)} menu(s)")
        return menus
