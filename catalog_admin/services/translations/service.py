"""Translation service."""
import logging
from typing import Any, Dict, List, Mapping, Sequence, Union

from pydantic import BaseModel

from catalog_admin.core.errors import NotFoundError, ValidationError
from catalog_admin.services.catalog.models import CATEGORIES, ITEMS, to_document
from catalog_admin.services.catalog.repository import CatalogRepository
from catalog_admin.services.catalog.validation import ensure_unique
from catalog_admin.services.translations.alignment import load_translation_documents
from catalog_admin.services.translations.models import (
    ALIGNED_FIELDS,
    TRANSLATION_MODELS,
    TRANSLATIONS,
    TranslationBase,
    realign,
    translation_id,
)

logger = logging.getLogger(__name__)


class TranslationService:
    """Per-language translation records for items, categories and menus."""

    def __init__(self, repository: CatalogRepository, supported_languages: Sequence[str]):
        self.repository = repository
        self.supported_languages = list(supported_languages)

    def _model_for(self, collection: str):
        if collection not in TRANSLATION_MODELS:
            raise ValidationError("collection", f"'{collection}' has no translations")
        return TRANSLATION_MODELS[collection]

    async def _get_entity(self, collection: str, entity_id: str):
        if collection == ITEMS:
            return await self.repository.get_item(entity_id)
        if collection == CATEGORIES:
            return await self.repository.get_category(entity_id)
        return await self.repository.get_menu(entity_id)

    async def list_translations(self, collection: str, entity_id: str) -> Dict[str, TranslationBase]:
        """Get every translation of an entity keyed by language code."""
        model = self._model_for(collection)
        await self._get_entity(collection, entity_id)
        documents = await load_translation_documents(self.repository.store, collection, entity_id)
        return {
            doc["language"]: model.model_validate(doc)
            for doc in sorted(documents, key=lambda doc: doc["language"])
        }

    async def get_translation(self, collection: str, entity_id: str, language: str) -> TranslationBase:
        model = self._model_for(collection)
        doc_id = translation_id(collection, entity_id, language)
        document = await self.repository.store.get(TRANSLATIONS, doc_id)
        if document is None:
            raise NotFoundError(TRANSLATIONS, doc_id)
        return model.model_validate(document)

    async def available_languages(self, collection: str, entity_id: str) -> List[str]:
        return list(await self.list_translations(collection, entity_id))

    async def save_translation(
        self,
        collection: str,
        entity_id: str,
        language: str,
        data: Union[BaseModel, Mapping[str, Any]],
    ) -> TranslationBase:
        """Create or replace a translation and touch its parent entity.

        Translated entries must reference existing option/extra/addon keys
        of the entity; they are stored in the entity's entry order.
        """
        repository = self.repository
        repository.require_operator()
        model = self._model_for(collection)
        if language not in self.supported_languages:
            raise ValidationError("language", f"unsupported language '{language}'")

        entity = await self._get_entity(collection, entity_id)
        payload = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        translation = model.model_validate(payload)

        for field in ALIGNED_FIELDS[collection]:
            entries = getattr(translation, field)
            ensure_unique(f"{field}.key", (entry.key for entry in entries))
            base_keys = [entry.key for entry in getattr(entity, field)]
            for entry in entries:
                if entry.key not in base_keys:
                    raise ValidationError(f"{field}.key", f"unknown entry key '{entry.key}'")
            setattr(translation, field, realign(entries, base_keys))

        doc_id = translation_id(collection, entity_id, language)
        existing = await repository.store.get(TRANSLATIONS, doc_id)
        now = repository.now()
        translation.collection = collection
        translation.entity_id = entity_id
        translation.language = language
        translation.created_at = model.model_validate(existing).created_at if existing else now
        translation.updated_at = now

        batch = repository.store.batch()
        batch.set(TRANSLATIONS, doc_id, to_document(translation))
        await self._stage_parent_touch(batch, collection, entity, now)
        await batch.commit()
        logger.info(f"[TRANSLATIONS] Saved {language} translation of {collection}/{entity_id}")
        return translation

    async def delete_translation(self, collection: str, entity_id: str, language: str) -> bool:
        """Delete a translation. Returns False if it did not exist."""
        repository = self.repository
        repository.require_operator()
        self._model_for(collection)
        entity = await self._get_entity(collection, entity_id)

        doc_id = translation_id(collection, entity_id, language)
        if await repository.store.get(TRANSLATIONS, doc_id) is None:
            return False

        now = repository.now()
        batch = repository.store.batch()
        batch.delete(TRANSLATIONS, doc_id)
        await self._stage_parent_touch(batch, collection, entity, now)
        await batch.commit()
        logger.info(f"[TRANSLATIONS] Deleted {language} translation of {collection}/{entity_id}")
        return True

    async def _stage_parent_touch(self, batch, collection: str, entity, now) -> None:
        # A menu's own timestamp is its parent touch; items and categories
        # also touch the menus they appear in.
        batch.update(collection, entity.id, {"updated_at": now.isoformat()})
        if collection == ITEMS:
            await self.repository.stage_touch_menus(batch, [entity.category], now)
        elif collection == CATEGORIES:
            await self.repository.stage_touch_menus(batch, [entity.id], now)
