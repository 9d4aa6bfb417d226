"""Catalog repository."""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from catalog_admin.core.context import AuthContext, Clock, utcnow
from catalog_admin.core.errors import AuthenticationError, NotFoundError, ValidationError
from catalog_admin.services.catalog.models import (
    CATEGORIES,
    ITEMS,
    MENUS,
    Category,
    CategoryCreate,
    CategoryUpdate,
    Item,
    ItemCreate,
    ItemFlags,
    ItemUpdate,
    Menu,
    MenuCreate,
    MenuType,
    MenuUpdate,
    to_document,
)
from catalog_admin.services.catalog.ordering import next_order
from catalog_admin.services.catalog.validation import (
    validate_category,
    validate_ids,
    validate_item,
    validate_menu,
)
from catalog_admin.services.store.base import DocumentStore, WriteBatch
from catalog_admin.services.translations.alignment import stage_realignment

logger = logging.getLogger(__name__)

FLAG_FIELDS = ("active", "vegetarian", "vegan", "spicy")

# Plain fields a partial update may clear by sending null
MENU_NULLABLE = ("image", "image_aspect_ratio")


def update_changes(update: BaseModel, nullable: Iterable[str] = ()) -> Dict[str, Any]:
    """Fields set on a partial update, refusing nulls for non-nullable fields."""
    changes = update.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in nullable:
            raise ValidationError(field, "must not be null")
    return changes


def readable_document(model: BaseModel) -> Dict[str, Any]:
    """Serialize a model, refusing documents that would not load back."""
    document = to_document(model)
    try:
        type(model).model_validate(document)
    except PydanticValidationError as e:
        error = e.errors()[0]
        raise ValidationError(".".join(str(part) for part in error["loc"]), error["msg"]) from e
    return document


class CatalogRepository:
    """Typed access to items, categories and menus in a document store."""

    def __init__(
        self,
        store: DocumentStore,
        auth: Optional[AuthContext] = None,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.auth = auth or AuthContext.anonymous()
        self.clock = clock

    def require_operator(self) -> None:
        """Refuse mutations when no authenticated operator is present."""
        if not self.auth.is_authenticated:
            raise AuthenticationError()

    def now(self) -> datetime:
        return self.clock()

    # Reads

    async def find_item(self, item_id: str) -> Optional[Item]:
        document = await self.store.get(ITEMS, item_id) if item_id else None
        return Item.model_validate(document) if document else None

    async def find_category(self, category_id: str) -> Optional[Category]:
        document = await self.store.get(CATEGORIES, category_id) if category_id else None
        return Category.model_validate(document) if document else None

    async def find_menu(self, menu_id: str) -> Optional[Menu]:
        document = await self.store.get(MENUS, menu_id) if menu_id else None
        return Menu.model_validate(document) if document else None

    async def get_item(self, item_id: str) -> Item:
        """Get an item or raise NotFoundError."""
        item = await self.find_item(item_id)
        if item is None:
            raise NotFoundError(ITEMS, item_id)
        return item

    async def get_category(self, category_id: str) -> Category:
        """Get a category or raise NotFoundError."""
        category = await self.find_category(category_id)
        if category is None:
            raise NotFoundError(CATEGORIES, category_id)
        return category

    async def get_menu(self, menu_id: str) -> Menu:
        """Get a menu or raise NotFoundError."""
        menu = await self.find_menu(menu_id)
        if menu is None:
            raise NotFoundError(MENUS, menu_id)
        return menu

    async def get_items(self, item_ids: Iterable[str]) -> List[Item]:
        """Get items by id in the given order, raising on the first missing id."""
        item_ids = list(item_ids)
        found = await self.store.get_many(ITEMS, item_ids)
        for item_id in item_ids:
            if item_id not in found:
                raise NotFoundError(ITEMS, item_id)
        return [Item.model_validate(found[item_id]) for item_id in item_ids]

    async def get_categories(self, category_ids: Iterable[str]) -> List[Category]:
        """Get categories by id in the given order, raising on the first missing id."""
        category_ids = list(category_ids)
        found = await self.store.get_many(CATEGORIES, category_ids)
        for category_id in category_ids:
            if category_id not in found:
                raise NotFoundError(CATEGORIES, category_id)
        return [Category.model_validate(found[category_id]) for category_id in category_ids]

    async def list_items(self, category_id: Optional[str] = None, active_only: bool = False) -> List[Item]:
        """List items, optionally restricted to a category, sorted by (order, id)."""
        if category_id is None:
            documents = await self.store.list(ITEMS)
        else:
            documents = await self.store.query(ITEMS, "category", category_id)
        items = [Item.model_validate(doc) for doc in documents]
        if active_only:
            items = [item for item in items if item.flags.active]
        return sorted(items, key=lambda item: (item.order, item.id))

    async def list_categories(self) -> List[Category]:
        documents = await self.store.list(CATEGORIES)
        return sorted(
            (Category.model_validate(doc) for doc in documents),
            key=lambda category: (category.name.lower(), category.id),
        )

    async def list_menus(self, menu_type: Optional[MenuType] = None, active_only: bool = False) -> List[Menu]:
        """List menus sorted by (order, id)."""
        if menu_type is None:
            documents = await self.store.list(MENUS)
        else:
            documents = await self.store.query(MENUS, "type", menu_type)
        menus = [Menu.model_validate(doc) for doc in documents]
        if active_only:
            menus = [menu for menu in menus if menu.is_active]
        return sorted(menus, key=lambda menu: (menu.order, menu.id))

    async def menus_containing(self, category_id: str) -> List[Menu]:
        documents = await self.store.query(MENUS, "categories", category_id, op="array_contains")
        return [Menu.model_validate(doc) for doc in documents]

    async def categories_listing(self, item_id: str) -> List[Category]:
        documents = await self.store.query(CATEGORIES, "items", item_id, op="array_contains")
        return [Category.model_validate(doc) for doc in documents]

    # Batch staging

    def stage_item(self, batch: WriteBatch, item: Item) -> Item:
        """Validate an item and add it to a batch."""
        validate_item(item.derive_flags())
        batch.set(ITEMS, item.id, readable_document(item))
        return item

    def stage_category(self, batch: WriteBatch, category: Category) -> Category:
        validate_category(category)
        batch.set(CATEGORIES, category.id, readable_document(category))
        return category

    def stage_menu(self, batch: WriteBatch, menu: Menu) -> Menu:
        validate_menu(menu)
        batch.set(MENUS, menu.id, readable_document(menu))
        return menu

    async def stage_touch_menus(
        self,
        batch: WriteBatch,
        category_ids: Iterable[str],
        now: datetime,
        skip: Iterable[str] = (),
    ) -> Set[str]:
        """Bump ``updated_at`` on every menu listing one of the categories.

        Menus in ``skip`` are already rewritten by the caller's batch.
        """
        skipped = set(skip)
        touched: Set[str] = set()
        for category_id in {c for c in category_ids if c}:
            for menu in await self.menus_containing(category_id):
                if menu.id in skipped or menu.id in touched:
                    continue
                batch.update(MENUS, menu.id, {"updated_at": now.isoformat()})
                touched.add(menu.id)
        return touched

    # Items

    async def add_item(self, item_in: ItemCreate) -> Item:
        """Add an item, appending it to its category when one is given."""
        self.require_operator()
        now = self.now()
        batch = self.store.batch()

        item = Item(
            id=self.store.new_id(),
            name=item_in.name,
            description=item_in.description,
            price=item_in.price,
            options=item_in.options,
            extras=item_in.extras,
            addons=item_in.addons,
            allergies=item_in.allergies,
            flags=ItemFlags(**{flag: getattr(item_in, flag) for flag in FLAG_FIELDS}),
            created_at=now,
            updated_at=now,
        )

        if item_in.category:
            category = await self.get_category(item_in.category)
            members = await self.list_items(category.id)
            item.category = category.id
            item.order = next_order(member.order for member in members)
            category.items = category.items + [item.id]
            category.updated_at = now
            self.stage_item(batch, item)
            self.stage_category(batch, category)
            await self.stage_touch_menus(batch, [category.id], now)
        else:
            self.stage_item(batch, item)

        await batch.commit()
        logger.info(f"[CATALOG] Added item {item.id} ({item.name}) category='{item.category}'")
        return item

    async def update_item(self, item_id: str, item_in: ItemUpdate) -> Item:
        """Apply a partial update to an item's plain fields."""
        self.require_operator()
        item = await self.get_item(item_id)
        changes = update_changes(item_in)
        if not changes:
            return item

        now = self.now()
        for field in ("name", "description", "price", "options", "extras", "addons", "allergies"):
            if field in changes:
                setattr(item, field, getattr(item_in, field))
        for flag in FLAG_FIELDS:
            if flag in changes:
                setattr(item.flags, flag, changes[flag])
        item.updated_at = now

        batch = self.store.batch()
        self.stage_item(batch, item)
        if {"options", "extras", "addons"} & changes.keys():
            await stage_realignment(self.store, batch, ITEMS, item, now)
        await self.stage_touch_menus(batch, [item.category], now)
        await batch.commit()
        logger.info(f"[CATALOG] Updated item {item.id} fields={sorted(changes)}")
        return item

    async def set_item_active(self, item_id: str, active: bool) -> Item:
        """Toggle an item's active flag."""
        return await self.update_item(item_id, ItemUpdate(active=active))

    # Categories

    async def add_category(self, category_in: CategoryCreate) -> Category:
        self.require_operator()
        now = self.now()
        category = Category(
            id=self.store.new_id(),
            **category_in.model_dump(),
            created_at=now,
            updated_at=now,
        )
        batch = self.store.batch()
        self.stage_category(batch, category)
        await batch.commit()
        logger.info(f"[CATALOG] Added category {category.id} ({category.name})")
        return category

    async def update_category(self, category_id: str, category_in: CategoryUpdate) -> Category:
        """Apply a partial update to a category's plain fields."""
        self.require_operator()
        category = await self.get_category(category_id)
        changes = update_changes(category_in)
        if not changes:
            return category

        now = self.now()
        for field in changes:
            setattr(category, field, getattr(category_in, field))
        category.updated_at = now

        batch = self.store.batch()
        self.stage_category(batch, category)
        if {"extras", "addons"} & changes.keys():
            await stage_realignment(self.store, batch, CATEGORIES, category, now)
        await self.stage_touch_menus(batch, [category.id], now)
        await batch.commit()
        logger.info(f"[CATALOG] Updated category {category.id} fields={sorted(changes)}")
        return category

    # Menus

    async def add_menu(self, menu_in: MenuCreate) -> Menu:
        """Add a menu at the end of its type's ordering."""
        self.require_operator()
        validate_ids("categories", menu_in.categories)
        await self.get_categories(menu_in.categories)

        now = self.now()
        siblings = await self.list_menus(menu_in.type)
        menu = Menu(
            id=self.store.new_id(),
            **menu_in.model_dump(),
            order=next_order(sibling.order for sibling in siblings),
            publish_status="draft",
            created_at=now,
            updated_at=now,
        )
        batch = self.store.batch()
        self.stage_menu(batch, menu)
        await batch.commit()
        logger.info(f"[CATALOG] Added {menu.type} menu {menu.id} ({menu.name})")
        return menu

    async def update_menu(self, menu_id: str, menu_in: MenuUpdate) -> Menu:
        """Apply a partial update to a menu's plain fields."""
        self.require_operator()
        menu = await self.get_menu(menu_id)
        changes = update_changes(menu_in, MENU_NULLABLE)
        if not changes:
            return menu

        for field in changes:
            setattr(menu, field, getattr(menu_in, field))
        menu.updated_at = self.now()

        batch = self.store.batch()
        self.stage_menu(batch, menu)
        await batch.commit()
        logger.info(f"[CATALOG] Updated menu {menu.id} fields={sorted(changes)}")
        return menu

    async def set_menu_active(self, menu_id: str, is_active: bool) -> Menu:
        """Toggle a menu's active flag."""
        return await self.update_menu(menu_id, MenuUpdate(is_active=is_active))
