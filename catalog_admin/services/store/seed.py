"""Seed catalog documents from a YAML file."""
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from catalog_admin.core.errors import ValidationError
from catalog_admin.services.store.base import DocumentStore

logger = logging.getLogger(__name__)

SeedData = Dict[str, Dict[str, Dict[str, Any]]]


def load_seed(path: Union[str, Path]) -> SeedData:
    """Load ``{collection: {id: document}}`` from a YAML file."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValidationError("seed", f"{path} must contain a mapping of collections")
    for collection, documents in data.items():
        if not isinstance(documents, dict):
            raise ValidationError("seed", f"collection '{collection}' must map ids to documents")
    return data


async def seed_store(store: DocumentStore, seed: SeedData, only_if_empty: bool = True) -> int:
    """Write seed documents in one batch. Returns the number written.

    With ``only_if_empty`` nothing is written when any seeded collection
    already holds documents.
    """
    if only_if_empty:
        for collection in seed:
            if await store.list(collection):
                logger.info(f"[SEED] Collection '{collection}' not empty, skipping seed")
                return 0

    batch = store.batch()
    for collection, documents in seed.items():
        for doc_id, document in documents.items():
            batch.set(collection, str(doc_id), document or {})
    await batch.commit()
    logger.info(f"[SEED] Wrote {len(batch)} documents across {len(seed)} collections")
    return len(batch)
