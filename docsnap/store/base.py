"""
Base protocol for document store backends.

This module defines the DocumentStore protocol that the catalog, reader,
snapshot writer and restore pipeline call, along with the factory that
picks a backend from a connection URI.

Invariants:
    - Backends translate driver errors into the docsnap error taxonomy
    - find() returns a fully materialized list, never a live cursor
    - insert_many() is ordered and reports partial success through
      DuplicateKeyError.inserted_count

How to change safely:
    - Protocol changes require updating all implementations
    - Keep InMemoryDocumentStore behaviour aligned with MongoDB semantics
      that the core relies on (projection, sort, duplicate _id rejection)
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..types import Namespace

if TYPE_CHECKING:
    from ..config import Settings

Document = dict[str, Any]
SortSpec = Sequence[tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for document store backends.

    Example:
        >>> store = create_document_store("mongodb://localhost:27017", settings)
        >>> await store.connect()
        >>> names = await store.list_databases()
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection. Calling it again is a no-op.

        Raises:
            ConnectivityError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the connection and its pool."""
        ...

    @abstractmethod
    async def list_databases(self) -> list[str]:
        """Names of all databases, in the order the store reports them."""
        ...

    @abstractmethod
    async def list_collections(self, database: str) -> list[str]:
        """Names of all collections in database."""
        ...

    @abstractmethod
    async def find(
        self,
        namespace: Namespace,
        filter: Mapping[str, Any] | None = None,
        projection: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> list[Document]:
        """Return every matching document.

        Args:
            namespace: Collection to query
            filter: Equality filter
            projection: Inclusion projection, e.g. {"title": 1}
            sort: Sort keys as (field, direction) pairs
        """
        ...

    @abstractmethod
    async def find_one(
        self,
        namespace: Namespace,
        filter: Mapping[str, Any],
    ) -> Document | None:
        """Return the first matching document or None."""
        ...

    @abstractmethod
    async def insert_many(
        self,
        namespace: Namespace,
        documents: Sequence[Document],
    ) -> int:
        """Insert documents in order and return how many were inserted.

        Raises:
            DuplicateKeyError: If an _id already exists in the collection
            ConnectivityError: If the store cannot be reached
        """
        ...

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether connect() has succeeded."""
        ...


def create_document_store(uri: str, settings: Settings) -> DocumentStore:
    """Factory function to create a document store from a URI.

    Args:
        uri: Connection URI ("mongodb://", "mongodb+srv://" or "memory://")
        settings: Settings providing pool size and timeouts

    Returns:
        Appropriate DocumentStore implementation

    Raises:
        ValueError: If the URI scheme is not supported
    """
    from .memory import InMemoryDocumentStore
    from .mongo import MongoDocumentStore

    scheme = uri.split("://", 1)[0].lower() if "://" in uri else ""
    if scheme in ("mongodb", "mongodb+srv"):
        return MongoDocumentStore(
            uri,
            max_pool_size=settings.max_pool_size,
            timeout_ms=settings.store_timeout_ms,
            server_selection_timeout_ms=settings.server_selection_timeout_ms,
        )
    elif scheme == "memory":
        return InMemoryDocumentStore()
    else:
        raise ValueError(f"Unsupported store URI scheme: {scheme or uri!r}")
