"""Snapshot generator: projects a menu into its public ``GeneratedMenu`` document."""
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from catalog_admin.core.context import Clock, utcnow
from catalog_admin.services.catalog.models import (
    CATEGORIES,
    ITEMS,
    MENUS,
    Category,
    Item,
    ItemAddon,
    ItemExtra,
    ItemOption,
    Menu,
)
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.translations.alignment import load_translation_documents

logger = logging.getLogger(__name__)


class ContactInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    phone: str = ""
    address: str = ""


class SnapshotRestaurant(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    contact_info: ContactInfo = Field(default_factory=ContactInfo, alias="contactInfo")


class SnapshotMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    type: str
    slug: str
    last_updated: str = Field(alias="lastUpdated")
    version: int


class SnapshotItemFlags(BaseModel):
    vegetarian: bool = False
    vegan: bool = False
    spicy: bool = False
    active: bool = True


class SnapshotItem(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float
    options: List[ItemOption] = []
    extras: List[ItemExtra] = []
    addons: List[ItemAddon] = []
    allergies: List[str] = []
    flags: SnapshotItemFlags
    order: int
    translations: Optional[Dict[str, Dict[str, Any]]] = None


class SnapshotCategory(BaseModel):
    id: str
    name: str
    description: str = ""
    header: str = ""
    footer: str = ""
    extras: List[ItemExtra] = []
    addons: List[ItemAddon] = []
    items: List[SnapshotItem] = []
    translations: Optional[Dict[str, Dict[str, Any]]] = None


class GeneratedMenu(BaseModel):
    """Public, self-contained menu document."""

    model_config = ConfigDict(populate_by_name=True)

    metadata: SnapshotMetadata
    restaurant: SnapshotRestaurant
    languages: List[str]
    default_language: str = Field(alias="defaultLanguage")
    translations: Optional[Dict[str, Dict[str, Any]]] = None
    categories: List[SnapshotCategory] = []

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def slugify(name: str) -> str:
    """Lowercase name with runs of non-alphanumerics collapsed to ``-``."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def artifact_path(menu_id: str) -> str:
    """Storage path of a menu's published artifact."""
    return f"menus/menu-{menu_id}.json"


# Translation fields copied into the artifact per collection.
TEXT_FIELDS = {
    ITEMS: ("name", "description"),
    CATEGORIES: ("name", "description", "header", "footer"),
    MENUS: ("name", "description"),
}
ENTRY_FIELDS = {
    ITEMS: ("options", "extras", "addons"),
    CATEGORIES: ("extras", "addons"),
    MENUS: (),
}


class SnapshotGenerator:
    """Builds ``GeneratedMenu`` documents from the live catalog."""

    def __init__(
        self,
        repository: CatalogRepository,
        restaurant: SnapshotRestaurant,
        default_language: str = "en",
        supported_languages: Sequence[str] = (),
        clock: Clock = utcnow,
    ):
        self.repository = repository
        self.restaurant = restaurant
        self.default_language = default_language
        self.supported_languages = set(supported_languages)
        self.clock = clock

    async def _translations(self, collection: str, entity_id: str) -> Dict[str, Dict[str, Any]]:
        """Non-empty translated fields per supported language."""
        formatted: Dict[str, Dict[str, Any]] = {}
        documents = await load_translation_documents(self.repository.store, collection, entity_id)
        for document in sorted(documents, key=lambda doc: doc.get("language", "")):
            language = document.get("language", "")
            if self.supported_languages and language not in self.supported_languages:
                continue
            fields: Dict[str, Any] = {}
            for field in TEXT_FIELDS[collection]:
                if document.get(field):
                    fields[field] = document[field]
            for field in ENTRY_FIELDS[collection]:
                entries = [e for e in document.get(field) or [] if e.get("text")]
                if entries:
                    fields[field] = [{"key": e["key"], "text": e["text"]} for e in entries]
            if fields:
                formatted[language] = fields
        return formatted

    async def _snapshot_item(self, item: Item, languages: set) -> SnapshotItem:
        translations = await self._translations(ITEMS, item.id)
        languages.update(translations)
        return SnapshotItem(
            id=item.id,
            name=item.name,
            description=item.description,
            price=item.price,
            options=item.options,
            extras=item.extras,
            addons=item.addons,
            allergies=item.allergies,
            flags=SnapshotItemFlags(
                vegetarian=item.flags.vegetarian,
                vegan=item.flags.vegan,
                spicy=item.flags.spicy,
                active=item.flags.active,
            ),
            order=item.order,
            translations=translations or None,
        )

    async def _snapshot_category(self, category: Category, languages: set) -> SnapshotCategory:
        documents = await self.repository.store.get_many(ITEMS, category.items)
        items = [Item.model_validate(doc) for doc in documents.values()]
        active = sorted(
            (item for item in items if item.flags.active),
            key=lambda item: (item.order, item.id),
        )
        translations = await self._translations(CATEGORIES, category.id)
        languages.update(translations)
        return SnapshotCategory(
            id=category.id,
            name=category.name,
            description=category.description,
            header=category.header,
            footer=category.footer,
            extras=category.extras,
            addons=category.addons,
            items=[await self._snapshot_item(item, languages) for item in active],
            translations=translations or None,
        )

    async def generate(self, menu: Menu, version: int) -> GeneratedMenu:
        """Project a menu, its categories in list order and their active items."""
        languages = {self.default_language}
        documents = await self.repository.store.get_many(CATEGORIES, menu.categories)
        categories = []
        for category_id in menu.categories:
            if category_id not in documents:
                logger.warning(f"[SNAPSHOT] Menu {menu.id} lists missing category {category_id}")
                continue
            category = Category.model_validate(documents[category_id])
            categories.append(await self._snapshot_category(category, languages))

        translations = await self._translations(MENUS, menu.id)
        languages.update(translations)

        snapshot = GeneratedMenu(
            metadata=SnapshotMetadata(
                id=menu.id,
                name=menu.name,
                description=menu.description,
                type=menu.type,
                slug=slugify(menu.name),
                last_updated=self.clock().isoformat(),
                version=version,
            ),
            restaurant=self.restaurant,
            languages=sorted(languages),
            default_language=self.default_language,
            translations=translations or None,
            categories=categories,
        )
        logger.info(
            f"[SNAPSHOT] Generated menu {menu.id} v{version}: {len(categories)} categories, "
            f"{sum(len(c.items) for c in categories)} items, {len(languages)} languages"
        )
        return snapshot
