"""Artifact storage for published menu documents."""
import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from catalog_admin.core.errors import StorageError

logger = logging.getLogger(__name__)


class ArtifactStorage(ABC):
    """Abstract base class for artifact storage."""

    @abstractmethod
    async def put(self, path: str, document: Dict[str, Any]) -> str:
        """Store a document and return its public URL."""
        pass

    @abstractmethod
    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a stored document back, or None if it does not exist."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        pass


class LocalArtifactStorage(ArtifactStorage):
    """Stores artifacts as JSON files below a directory served at ``base_url``."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageError(f"Artifact path escapes storage root: {path}", "resolve")
        return target

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def put(self, path: str, document: Dict[str, Any]) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StorageError(f"Failed to write artifact {path}: {e}", "put") from e
        logger.info(f"[ARTIFACTS] Wrote {path}")
        return self.url_for(path)

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        target = self._resolve(path)
        if not target.exists():
            return None
        try:
            with open(target, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read artifact {path}: {e}", "get") from e

    async def delete(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.exists():
            logger.info(f"[ARTIFACTS] {path} not found (already deleted?)")
            return False
        try:
            target.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete artifact {path}: {e}", "delete") from e
        logger.info(f"[ARTIFACTS] Deleted {path}")
        return True


class InMemoryArtifactStorage(ArtifactStorage):
    """Artifact storage kept in process memory."""

    def __init__(self, base_url: str = "memory://artifacts"):
        self.base_url = base_url.rstrip("/")
        self.documents: Dict[str, Dict[str, Any]] = {}

    async def put(self, path: str, document: Dict[str, Any]) -> str:
        self.documents[path] = copy.deepcopy(document)
        return f"{self.base_url}/{path}"

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        document = self.documents.get(path)
        return copy.deepcopy(document) if document is not None else None

    async def delete(self, path: str) -> bool:
        return self.documents.pop(path, None) is not None
