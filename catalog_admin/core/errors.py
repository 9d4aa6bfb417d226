"""Catalog error taxonomy."""
from typing import Optional


class CatalogError(Exception):
    """Base class for errors raised by the catalog services."""

    status_code = 400

    @property
    def detail(self) -> str:
        return str(self)


class ValidationError(CatalogError):
    """Malformed entity or command; raised before any write."""

    status_code = 422

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class NotFoundError(CatalogError):
    """A referenced document does not exist."""

    status_code = 404

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{collection} '{doc_id}' not found")


class ConflictError(CatalogError):
    """Optimistic check failed; the caller should re-fetch and retry."""

    status_code = 409


class PublicationStateError(ConflictError):
    """Publish action not allowed in the menu's current state."""


class StorageError(CatalogError):
    """A document store or artifact storage call failed."""

    status_code = 502

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class AuthenticationError(CatalogError):
    """No authenticated operator is present."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)
