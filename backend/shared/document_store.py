"""
Document store adapters.

The platform keeps profiles, invitations, relationships, and audit entries
in a schemaless per-collection key/value store. The store guarantees
atomicity for a single document only; there are no cross-document
transactions, so callers order their writes so that partial failure is
recoverable.

Two implementations are provided:
- InMemoryDocumentStore: for tests and local development
- SupabaseDocumentStore: one PostgREST table per collection, keyed by ``id``
"""

import copy
import threading
import uuid
from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from postgrest.exceptions import APIError
from supabase import Client

from .exceptions import AlreadyExistsError, DownstreamError

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

Document = dict[str, Any]


class DocumentStoreError(DownstreamError):
    """Native error raised by a document store."""


class DocumentAlreadyExistsError(DocumentStoreError):
    """Raised when a create-if-absent write hits an existing key."""

    maps_to = AlreadyExistsError

    def __init__(self, collection: str, key: str):
        super().__init__(f"Document already exists: {collection}/{key}")
        self.collection = collection
        self.key = key


@runtime_checkable
class IDocumentStore(Protocol):
    """
    Interface for the document store.

    Documents are JSON-ready dicts. The key of every document is stored
    in its ``id`` field.
    """

    def get(self, collection: str, key: str) -> Optional[Document]:
        """Return the document, or None if absent."""
        ...

    def create(self, collection: str, key: str, data: Document) -> Document:
        """
        Create a document only if the key is free.

        Raises:
            DocumentAlreadyExistsError: If the key is taken
        """
        ...

    def set(self, collection: str, key: str, data: Document) -> Document:
        """Create or fully replace a document."""
        ...

    def update(
        self,
        collection: str,
        key: str,
        changes: Document,
        expected: Optional[Document] = None,
    ) -> Optional[Document]:
        """
        Atomically update fields of a single document.

        Args:
            collection: Collection name
            key: Document key
            changes: Fields to set
            expected: Optional field values the document must still hold
                for the write to apply (conditional write)

        Returns:
            The updated document, or None if it is absent or does not
            match ``expected``
        """
        ...

    def query(
        self,
        collection: str,
        filters: Optional[Document] = None,
        less_than: Optional[Document] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        """Return documents matching equality and upper-bound filters."""
        ...

    def update_where(
        self,
        collection: str,
        filters: Document,
        changes: Document,
    ) -> int:
        """Update every document matching ``filters``; return the count."""
        ...

    def add(self, collection: str, data: Document) -> str:
        """Insert a document under a generated key and return the key."""
        ...


def _comparable(value: Any) -> Any:
    """Make ISO timestamps comparable regardless of their UTC suffix."""
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


def _matches(
    document: Document,
    filters: Optional[Document],
    less_than: Optional[Document],
) -> bool:
    for field, value in (filters or {}).items():
        if document.get(field) != value:
            return False
    for field, bound in (less_than or {}).items():
        current = document.get(field)
        if current is None or not _comparable(current) < _comparable(bound):
            return False
    return True


class InMemoryDocumentStore:
    """
    Document store kept in process memory.

    A single lock makes every operation atomic, which mirrors the
    single-document guarantees of the real store. Documents are deep
    copied in and out so callers never share state with the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._lock = threading.Lock()

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, key: str) -> Optional[Document]:
        with self._lock:
            document = self._collection(collection).get(key)
            return copy.deepcopy(document) if document is not None else None

    def create(self, collection: str, key: str, data: Document) -> Document:
        with self._lock:
            documents = self._collection(collection)
            if key in documents:
                raise DocumentAlreadyExistsError(collection, key)
            documents[key] = {**copy.deepcopy(data), "id": key}
            return copy.deepcopy(documents[key])

    def set(self, collection: str, key: str, data: Document) -> Document:
        with self._lock:
            documents = self._collection(collection)
            documents[key] = {**copy.deepcopy(data), "id": key}
            return copy.deepcopy(documents[key])

    def update(
        self,
        collection: str,
        key: str,
        changes: Document,
        expected: Optional[Document] = None,
    ) -> Optional[Document]:
        with self._lock:
            document = self._collection(collection).get(key)
            if document is None or not _matches(document, expected, None):
                return None
            document.update(copy.deepcopy(changes))
            return copy.deepcopy(document)

    def query(
        self,
        collection: str,
        filters: Optional[Document] = None,
        less_than: Optional[Document] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        with self._lock:
            results = [
                copy.deepcopy(d)
                for d in self._collection(collection).values()
                if _matches(d, filters, less_than)
            ]
        if order_by:
            results.sort(
                key=lambda d: (d.get(order_by) is None, _comparable(d.get(order_by))),
                reverse=descending,
            )
        if limit is not None:
            results = results[:limit]
        return results

    def update_where(
        self,
        collection: str,
        filters: Document,
        changes: Document,
    ) -> int:
        with self._lock:
            count = 0
            for document in self._collection(collection).values():
                if _matches(document, filters, None):
                    document.update(copy.deepcopy(changes))
                    count += 1
            return count

    def add(self, collection: str, data: Document) -> str:
        key = str(uuid.uuid4())
        self.create(collection, key, data)
        return key


class SupabaseDocumentStore:
    """
    Document store backed by Supabase (PostgREST).

    Each collection is a table with a text ``id`` primary key. Single-row
    UPDATE statements give the per-document atomicity the services rely
    on, including conditional writes.
    """

    def __init__(self, supabase_client: Client):
        self._db = supabase_client

    def get(self, collection: str, key: str) -> Optional[Document]:
        try:
            result = self._db.table(collection).select("*").eq("id", key).limit(1).execute()
        except APIError as e:
            raise DocumentStoreError(f"Failed to read {collection}/{key}: {e.message}") from e
        return result.data[0] if result.data else None

    def create(self, collection: str, key: str, data: Document) -> Document:
        try:
            result = self._db.table(collection).insert({**data, "id": key}).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DocumentAlreadyExistsError(collection, key) from e
            raise DocumentStoreError(f"Failed to create {collection}/{key}: {e.message}") from e
        return result.data[0]

    def set(self, collection: str, key: str, data: Document) -> Document:
        try:
            result = self._db.table(collection).upsert({**data, "id": key}).execute()
        except APIError as e:
            raise DocumentStoreError(f"Failed to write {collection}/{key}: {e.message}") from e
        return result.data[0]

    def update(
        self,
        collection: str,
        key: str,
        changes: Document,
        expected: Optional[Document] = None,
    ) -> Optional[Document]:
        query = self._db.table(collection).update(changes).eq("id", key)
        for field, value in (expected or {}).items():
            query = query.eq(field, value)
        try:
            result = query.execute()
        except APIError as e:
            raise DocumentStoreError(f"Failed to update {collection}/{key}: {e.message}") from e
        return result.data[0] if result.data else None

    def query(
        self,
        collection: str,
        filters: Optional[Document] = None,
        less_than: Optional[Document] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        query = self._db.table(collection).select("*")
        for field, value in (filters or {}).items():
            query = query.eq(field, value)
        for field, bound in (less_than or {}).items():
            query = query.lt(field, bound)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        try:
            result = query.execute()
        except APIError as e:
            raise DocumentStoreError(f"Failed to query {collection}: {e.message}") from e
        return result.data

    def update_where(
        self,
        collection: str,
        filters: Document,
        changes: Document,
    ) -> int:
        query = self._db.table(collection).update(changes)
        for field, value in filters.items():
            query = query.eq(field, value)
        try:
            result = query.execute()
        except APIError as e:
            raise DocumentStoreError(f"Failed to update {collection}: {e.message}") from e
        return len(result.data)

    def add(self, collection: str, data: Document) -> str:
        key = str(uuid.uuid4())
        self.create(collection, key, data)
        return key
