"""In-memory document store."""
import copy
from typing import Any, Dict, Iterable, List, Optional

from catalog_admin.core.errors import NotFoundError
from catalog_admin.services.store.base import BatchOperation, DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """Document store kept in process memory, used for tests and local runs."""

    def __init__(self, seed: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        """Initialize with optional ``{collection: {id: document}}`` seed data."""
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for collection, documents in (seed or {}).items():
            self._collections[collection] = {
                doc_id: {**copy.deepcopy(doc), "id": doc_id}
                for doc_id, doc in documents.items()
            }

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by id."""
        document = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def list(self, collection: str) -> List[Dict[str, Any]]:
        """Get every document in a collection."""
        return [copy.deepcopy(doc) for doc in self._collections.get(collection, {}).values()]

    async def apply(self, operations: Iterable[BatchOperation]) -> None:
        """Apply writes to a staged copy and swap it in only if all succeed."""
        staged = copy.deepcopy(self._collections)
        for operation in operations:
            documents = staged.setdefault(operation.collection, {})
            if operation.kind == "set":
                documents[operation.doc_id] = copy.deepcopy(operation.data)
            elif operation.kind == "update":
                if operation.doc_id not in documents:
                    raise NotFoundError(operation.collection, operation.doc_id)
                documents[operation.doc_id].update(copy.deepcopy(operation.data))
            elif operation.kind == "delete":
                documents.pop(operation.doc_id, None)
            else:
                raise ValueError(f"Unknown batch operation: {operation.kind}")
        self._collections = staged

    def clear(self) -> None:
        """Drop every collection."""
        self._collections = {}
