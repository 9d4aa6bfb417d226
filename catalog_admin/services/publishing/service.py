"""Publication state machine: publish, update and unpublish menus.

States move ``draft -> published -> unpublished -> published ...``.
Staleness is never stored; it is derived from ``updated_at`` and
``last_published`` on every read.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import BaseModel

from catalog_admin.core.errors import CatalogError, ConflictError, PublicationStateError, StorageError
from catalog_admin.services.catalog.models import MENUS, Menu, MenuType
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.validation import validate_menu
from catalog_admin.services.publishing.snapshot import SnapshotGenerator, artifact_path, slugify
from catalog_admin.services.publishing.storage import ArtifactStorage
from catalog_admin.services.publishing.website import (
    PublishedMenuEntry,
    stage_published_entry,
    stage_removed_entry,
)

logger = logging.getLogger(__name__)

# Publish calls in flight, per menu id (shared across service instances).
# Entries live only while a call holds them.
_publish_locks: Dict[str, asyncio.Lock] = {}

PAST_TENSE = {"publish": "published", "update": "updated"}


def is_stale(menu: Menu) -> bool:
    """A published menu is stale once its content changed after the last publish."""
    return (
        menu.publish_status == "published"
        and menu.updated_at is not None
        and menu.last_published is not None
        and menu.updated_at > menu.last_published
    )


class MenuPublicationStatus(BaseModel):
    """Publish state of a menu as shown to the operator."""

    menu_id: str
    name: str
    type: str
    is_active: bool
    publish_status: str
    published_url: Optional[str] = None
    published_at: Optional[datetime] = None
    last_published: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    snapshot_version: int = 0
    is_stale: bool = False

    @classmethod
    def from_menu(cls, menu: Menu) -> "MenuPublicationStatus":
        return cls(
            menu_id=menu.id,
            name=menu.name,
            type=menu.type,
            is_active=menu.is_active,
            publish_status=menu.publish_status,
            published_url=menu.published_url,
            published_at=menu.published_at,
            last_published=menu.last_published,
            updated_at=menu.updated_at,
            snapshot_version=menu.snapshot_version,
            is_stale=is_stale(menu),
        )


class PublishResult(BaseModel):
    success: bool = True
    action: str
    menu_id: str
    publish_status: str
    url: Optional[str] = None
    version: Optional[int] = None
    published_at: Optional[datetime] = None
    message: str = ""


class PublicationService:
    """Turns menus into published artifacts and back."""

    def __init__(
        self,
        repository: CatalogRepository,
        generator: SnapshotGenerator,
        storage: ArtifactStorage,
    ):
        self.repository = repository
        self.generator = generator
        self.storage = storage

    @asynccontextmanager
    async def _menu_lock(self, menu_id: str) -> AsyncIterator[None]:
        """Hold the menu's publish lock, failing fast when another call has it."""
        lock = _publish_locks.setdefault(menu_id, asyncio.Lock())
        if lock.locked():
            raise ConflictError(f"A publish action for menu '{menu_id}' is already in progress")
        try:
            async with lock:
                yield
        finally:
            if _publish_locks.get(menu_id) is lock and not lock.locked():
                del _publish_locks[menu_id]

    async def publish(self, menu_id: str) -> PublishResult:
        """Generate and store a menu's artifact, then mark it published."""
        return await self._publish(menu_id, "publish")

    async def update(self, menu_id: str) -> PublishResult:
        """Regenerate the artifact of an already published menu."""
        return await self._publish(menu_id, "update")

    async def _publish(self, menu_id: str, action: str) -> PublishResult:
        repository = self.repository
        repository.require_operator()

        async with self._menu_lock(menu_id):
            menu = await repository.get_menu(menu_id)
            if action == "update" and menu.publish_status != "published":
                raise PublicationStateError(f"Menu '{menu_id}' is not published")
            if not menu.is_active:
                raise PublicationStateError(f"Menu '{menu_id}' is inactive and cannot be published")

            # Watermark taken before reading the graph so edits made while
            # generating still count as newer than the publish.
            watermark = repository.now()
            version = menu.snapshot_version + 1
            snapshot = await self.generator.generate(menu, version)
            path = artifact_path(menu.id)
            previous = await self.storage.get(path)
            url = await self.storage.put(path, snapshot.to_document())
            try:
                menu.publish_status = "published"
                menu.published_url = url
                menu.published_at = watermark
                menu.last_published = watermark
                menu.snapshot_version = version
                validate_menu(menu)

                batch = repository.store.batch()
                batch.update(MENUS, menu.id, {
                    "publish_status": menu.publish_status,
                    "published_url": url,
                    "published_at": watermark.isoformat(),
                    "last_published": watermark.isoformat(),
                    "snapshot_version": version,
                })
                await stage_published_entry(
                    repository.store,
                    batch,
                    PublishedMenuEntry(
                        menu_id=menu.id,
                        name=menu.name,
                        slug=slugify(menu.name),
                        description=menu.description,
                        type=menu.type,
                        is_active=menu.is_active,
                        order=menu.order,
                        published_at=watermark,
                        published_url=url,
                        last_published=watermark,
                    ),
                    watermark,
                )
                await batch.commit()
            except CatalogError:
                await self._restore_artifact(path, previous)
                raise

        logger.info(f"[PUBLISH] {action} menu {menu_id} v{version} -> {url}")
        return PublishResult(
            action=action,
            menu_id=menu_id,
            publish_status=menu.publish_status,
            url=url,
            version=version,
            published_at=watermark,
            message=f"Menu {PAST_TENSE[action]} successfully",
        )

    async def _restore_artifact(self, path: str, previous: Optional[Dict[str, Any]]) -> None:
        """Put back the artifact a failed state change replaced or removed."""
        try:
            if previous is None:
                await self.storage.delete(path)
            else:
                await self.storage.put(path, previous)
        except StorageError as e:
            logger.error(f"[PUBLISH] Could not restore artifact {path}: {e}")

    async def unpublish(self, menu_id: str) -> PublishResult:
        """Remove a menu's artifact and mark it unpublished."""
        repository = self.repository
        repository.require_operator()

        async with self._menu_lock(menu_id):
            menu = await repository.get_menu(menu_id)
            if menu.publish_status != "published":
                raise PublicationStateError(f"Menu '{menu_id}' is not published")

            path = artifact_path(menu.id)
            previous = await self.storage.get(path)
            await self.storage.delete(path)

            now = repository.now()
            menu.publish_status = "unpublished"
            menu.published_url = None
            batch = repository.store.batch()
            batch.update(MENUS, menu.id, {"publish_status": "unpublished", "published_url": None})
            await stage_removed_entry(repository.store, batch, menu.id, now)
            try:
                await batch.commit()
            except CatalogError:
                if previous is not None:
                    await self._restore_artifact(path, previous)
                raise

        logger.info(f"[PUBLISH] unpublish menu {menu_id}")
        return PublishResult(
            action="unpublish",
            menu_id=menu_id,
            publish_status=menu.publish_status,
            message="Menu unpublished successfully",
        )

    async def status(self, menu_id: str) -> MenuPublicationStatus:
        menu = await self.repository.get_menu(menu_id)
        return MenuPublicationStatus.from_menu(menu)

    async def list_statuses(self, menu_type: Optional[MenuType] = None) -> List[MenuPublicationStatus]:
        menus = await self.repository.list_menus(menu_type)
        return [MenuPublicationStatus.from_menu(menu) for menu in menus]

    async def get_artifact(self, menu_id: str) -> Optional[dict]:
        """Read back a menu's published artifact."""
        return await self.storage.get(artifact_path(menu_id))
