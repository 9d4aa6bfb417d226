"""Translation API endpoints."""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from catalog_admin.api.auth import require_auth
from catalog_admin.core.dependencies import get_translation_service
from catalog_admin.core.errors import NotFoundError
from catalog_admin.services.translations.models import TRANSLATIONS, translation_id
from catalog_admin.services.translations.service import TranslationService

router = APIRouter(dependencies=[Depends(require_auth)])
logger = logging.getLogger(__name__)


@router.get("/api/translations/{collection}/{entity_id}")
async def list_translations(
    collection: str,
    entity_id: str,
    service: TranslationService = Depends(get_translation_service),
) -> Dict[str, Dict[str, Any]]:
    """All translations of an entity keyed by language code."""
    translations = await service.list_translations(collection, entity_id)
    return {language: translation.model_dump(mode="json") for language, translation in translations.items()}


@router.get("/api/translations/{collection}/{entity_id}/languages")
async def available_languages(
    collection: str,
    entity_id: str,
    service: TranslationService = Depends(get_translation_service),
) -> List[str]:
    return await service.available_languages(collection, entity_id)


@router.get("/api/translations/{collection}/{entity_id}/{language}")
async def get_translation(
    collection: str,
    entity_id: str,
    language: str,
    service: TranslationService = Depends(get_translation_service),
) -> Dict[str, Any]:
    translation = await service.get_translation(collection, entity_id, language)
    return translation.model_dump(mode="json")


@router.put("/api/translations/{collection}/{entity_id}/{language}")
async def save_translation(
    collection: str,
    entity_id: str,
    language: str,
    data: Dict[str, Any] = Body(...),
    service: TranslationService = Depends(get_translation_service),
) -> Dict[str, Any]:
    """Create or replace a translation."""
    translation = await service.save_translation(collection, entity_id, language, data)
    return translation.model_dump(mode="json")


@router.delete("/api/translations/{collection}/{entity_id}/{language}")
async def delete_translation(
    collection: str,
    entity_id: str,
    language: str,
    service: TranslationService = Depends(get_translation_service),
):
    if not await service.delete_translation(collection, entity_id, language):
        raise NotFoundError(TRANSLATIONS, translation_id(collection, entity_id, language))
    logger.info(f"[TRANSLATIONS] Removed {collection}/{entity_id}/{language}")
    return {"success": True}
