"""Website configuration: the list of currently published menus."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from catalog_admin.services.catalog.models import to_document
from catalog_admin.services.store.base import DocumentStore, WriteBatch

WEBSITE_CONFIG = "website_config"
WEBSITE_CONFIG_ID = "default"


class PublishedMenuEntry(BaseModel):
    menu_id: str
    name: str
    slug: str
    description: str = ""
    type: str = "web"
    is_active: bool = True
    order: int = 0
    published_at: Optional[datetime] = None
    published_url: Optional[str] = None
    last_published: Optional[datetime] = None


class WebsiteConfig(BaseModel):
    published_menus: List[PublishedMenuEntry] = []
    last_updated: Optional[datetime] = None


async def get_website_config(store: DocumentStore) -> WebsiteConfig:
    """Get the website configuration, or an empty one if none is stored."""
    document = await store.get(WEBSITE_CONFIG, WEBSITE_CONFIG_ID)
    return WebsiteConfig.model_validate(document) if document else WebsiteConfig()


async def stage_published_entry(
    store: DocumentStore, batch: WriteBatch, entry: PublishedMenuEntry, now: datetime
) -> WebsiteConfig:
    """Insert or replace a menu's entry, keeping entries sorted by order."""
    config = await get_website_config(store)
    entries = [e for e in config.published_menus if e.menu_id != entry.menu_id]
    entries.append(entry)
    config.published_menus = sorted(entries, key=lambda e: (e.order, e.menu_id))
    config.last_updated = now
    batch.set(WEBSITE_CONFIG, WEBSITE_CONFIG_ID, to_document(config))
    return config


async def stage_removed_entry(
    store: DocumentStore, batch: WriteBatch, menu_id: str, now: datetime
) -> WebsiteConfig:
    """Remove a menu's entry."""
    config = await get_website_config(store)
    config.published_menus = [e for e in config.published_menus if e.menu_id != menu_id]
    config.last_updated = now
    batch.set(WEBSITE_CONFIG, WEBSITE_CONFIG_ID, to_document(config))
    return config
