"""SQLAlchemy-backed document store."""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_admin.core.errors import NotFoundError, StorageError
from catalog_admin.db.models import Document
from catalog_admin.services.store.base import BatchOperation, DocumentStore

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    """Document store persisting JSON documents in the ``documents`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by id."""
        try:
            row = await self.db.get(Document, (collection, doc_id))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {collection}/{doc_id}: {e}", "get") from e
        return dict(row.data) if row is not None else None

    async def list(self, collection: str) -> List[Dict[str, Any]]:
        """Get every document in a collection."""
        try:
            result = await self.db.execute(
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.created_at, Document.id)
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list {collection}: {e}", "list") from e
        return [dict(row.data) for row in result.scalars().all()]

    async def apply(self, operations: Iterable[BatchOperation]) -> None:
        """Apply writes inside a single transaction."""
        operations = list(operations)
        staged: Dict[Tuple[str, str], Optional[Document]] = {}
        try:
            for operation in operations:
                key = (operation.collection, operation.doc_id)
                if key in staged:
                    row = staged[key]
                else:
                    row = await self.db.get(Document, key)

                if operation.kind == "set":
                    if row is None:
                        row = Document(
                            collection=operation.collection,
                            id=operation.doc_id,
                            data=dict(operation.data),
                        )
                        self.db.add(row)
                    else:
                        row.data = dict(operation.data)
                        row.updated_at = datetime.utcnow()
                elif operation.kind == "update":
                    if row is None:
                        raise NotFoundError(operation.collection, operation.doc_id)
                    # Reassign so the JSON column is flagged dirty.
                    row.data = {**row.data, **operation.data}
                    row.updated_at = datetime.utcnow()
                elif operation.kind == "delete":
                    if row is not None and row in self.db.new:
                        self.db.expunge(row)
                    elif row is not None:
                        await self.db.delete(row)
                    row = None
                else:
                    raise ValueError(f"Unknown batch operation: {operation.kind}")
                staged[key] = row

            await self.db.commit()
        except NotFoundError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[STORE] Batch of {len(operations)} writes rolled back: {e}")
            raise StorageError(f"Batch commit failed: {e}", "commit") from e
