"""Document store interface."""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional


QUERY_OPERATORS = ("==", "array_contains")


@dataclass(frozen=True)
class BatchOperation:
    """One write inside a batch."""

    kind: str  # set, update, delete
    collection: str
    doc_id: str
    data: Optional[Dict[str, Any]] = None


def get_field(document: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted field path such as ``flags.active``."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def matches(document: Dict[str, Any], field: str, value: Any, op: str) -> bool:
    """Check a document against a single-field filter."""
    current = get_field(document, field)
    if op == "==":
        return current == value
    if op == "array_contains":
        return isinstance(current, list) and value in current
    raise ValueError(f"Unsupported query operator: {op}")


class WriteBatch:
    """Collects writes that are committed together or not at all."""

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._operations: List[BatchOperation] = []

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> "WriteBatch":
        """Create or fully replace a document."""
        self._operations.append(
            BatchOperation("set", collection, doc_id, {**data, "id": doc_id})
        )
        return self

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> "WriteBatch":
        """Merge top-level fields into an existing document."""
        self._operations.append(BatchOperation("update", collection, doc_id, dict(fields)))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        """Delete a document; deleting a missing document is a no-op."""
        self._operations.append(BatchOperation("delete", collection, doc_id))
        return self

    @property
    def operations(self) -> List[BatchOperation]:
        return list(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    async def commit(self) -> None:
        """Apply every collected write atomically."""
        if self._operations:
            await self._store.apply(self._operations)


class DocumentStore(ABC):
    """Abstract base class for document stores."""

    def new_id(self) -> str:
        """Generate a server-side document id."""
        return uuid.uuid4().hex

    def batch(self) -> WriteBatch:
        """Start a new write batch."""
        return WriteBatch(self)

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by id."""
        pass

    @abstractmethod
    async def list(self, collection: str) -> List[Dict[str, Any]]:
        """Get every document in a collection."""
        pass

    @abstractmethod
    async def apply(self, operations: Iterable[BatchOperation]) -> None:
        """Apply a batch of writes with all-or-nothing semantics."""
        pass

    async def get_many(self, collection: str, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Get several documents by id; missing ids are left out."""
        found = {}
        for doc_id in doc_ids:
            document = await self.get(collection, doc_id)
            if document is not None:
                found[doc_id] = document
        return found

    async def query(
        self, collection: str, field: str, value: Any, op: str = "=="
    ) -> List[Dict[str, Any]]:
        """Get documents whose field matches a value."""
        if op not in QUERY_OPERATORS:
            raise ValueError(f"Unsupported query operator: {op}")
        documents = await self.list(collection)
        return [doc for doc in documents if matches(doc, field, value, op)]
