"""Keep translation records aligned with their base entity inside a batch."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Sequence

from catalog_admin.services.catalog.models import to_document
from catalog_admin.services.store.base import DocumentStore, WriteBatch
from catalog_admin.services.translations.models import (
    ALIGNED_FIELDS,
    TRANSLATION_MODELS,
    TRANSLATIONS,
    realign,
)

logger = logging.getLogger(__name__)


async def load_translation_documents(
    store: DocumentStore, collection: str, entity_id: str
) -> List[Dict[str, Any]]:
    """Get every translation document of one entity."""
    documents = await store.query(TRANSLATIONS, "entity_id", entity_id)
    return [doc for doc in documents if doc.get("collection") == collection]


async def stage_realignment(
    store: DocumentStore,
    batch: WriteBatch,
    collection: str,
    entity: Any,
    now: datetime,
) -> int:
    """Drop translated entries whose base entry is gone and follow base order.

    Returns the number of translation records rewritten.
    """
    fields: Sequence[str] = ALIGNED_FIELDS[collection]
    if not fields:
        return 0

    model = TRANSLATION_MODELS[collection]
    rewritten = 0
    for document in await load_translation_documents(store, collection, entity.id):
        translation = model.model_validate(document)
        changed = False
        for field in fields:
            base_keys = [entry.key for entry in getattr(entity, field)]
            current = getattr(translation, field)
            aligned = realign(current, base_keys)
            if [e.key for e in aligned] != [e.key for e in current]:
                setattr(translation, field, aligned)
                changed = True
        if changed:
            translation.updated_at = now
            batch.set(TRANSLATIONS, document["id"], to_document(translation))
            rewritten += 1

    if rewritten:
        logger.info(
            f"[TRANSLATIONS] Realigned {rewritten} translation(s) of {collection}/{entity.id}"
        )
    return rewritten


async def stage_delete_translations(
    store: DocumentStore, batch: WriteBatch, collection: str, entity_id: str
) -> int:
    """Delete every translation of an entity as part of a batch."""
    documents = await load_translation_documents(store, collection, entity_id)
    for document in documents:
        batch.delete(TRANSLATIONS, document["id"])
    return len(documents)
