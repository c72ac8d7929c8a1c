"""
Base repository class for document access.

Provides a common abstraction layer for all repositories, encapsulating
document store access and the mapping between stored documents and
Pydantic models.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from .document_store import Document, IDocumentStore


T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for document operations:
    - Document store access via self._store
    - Model <-> document mapping via _to_document / _from_document

    Subclasses set ``model`` and ``collection`` and add domain-specific
    data access methods.

    Example:
        class RelationshipRepository(BaseRepository[Relationship]):
            model = Relationship
            collection = "therapist_patients"

            def get(self, relationship_id: str) -> Optional[Relationship]:
                return self._get(relationship_id)
    """

    model: type[T]
    collection: str

    def __init__(self, store: IDocumentStore) -> None:
        """
        Initialize the repository with a document store.

        Args:
            store: Document store instance for persistence.
        """
        self._store = store

    def _to_document(self, item: T) -> Document:
        return item.model_dump(mode="json")

    def _from_document(self, document: Document) -> T:
        return self.model.model_validate(document)

    def _get(self, key: str) -> Optional[T]:
        document = self._store.get(self.collection, key)
        if document is None:
            return None
        return self._from_document(document)
