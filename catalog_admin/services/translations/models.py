"""Translation overlay models."""
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Type

from pydantic import BaseModel

from catalog_admin.services.catalog.models import CATEGORIES, ITEMS, MENUS

TRANSLATIONS = "translations"


class TranslatedEntry(BaseModel):
    """Translated text for one option, extra or addon, addressed by its key."""

    key: str
    text: str


class TranslationBase(BaseModel):
    collection: str = ""
    entity_id: str = ""
    language: str = ""
    name: str = ""
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ItemTranslation(TranslationBase):
    options: List[TranslatedEntry] = []
    extras: List[TranslatedEntry] = []
    addons: List[TranslatedEntry] = []


class CategoryTranslation(TranslationBase):
    header: str = ""
    footer: str = ""
    extras: List[TranslatedEntry] = []
    addons: List[TranslatedEntry] = []


class MenuTranslation(TranslationBase):
    pass


TRANSLATION_MODELS: Dict[str, Type[TranslationBase]] = {
    ITEMS: ItemTranslation,
    CATEGORIES: CategoryTranslation,
    MENUS: MenuTranslation,
}

# Entry lists of the base entity that translations are keyed against.
ALIGNED_FIELDS: Dict[str, Sequence[str]] = {
    ITEMS: ("options", "extras", "addons"),
    CATEGORIES: ("extras", "addons"),
    MENUS: (),
}


def translation_id(collection: str, entity_id: str, language: str) -> str:
    """Document id of a translation record."""
    return f"{collection}:{entity_id}:{language}"


def realign(entries: Sequence[TranslatedEntry], base_keys: Sequence[str]) -> List[TranslatedEntry]:
    """Keep entries whose key still exists, in the base entity's order."""
    by_key = {entry.key: entry for entry in entries}
    return [by_key[key] for key in base_keys if key in by_key]
