"""
In-memory document store implementation for testing.

This module provides a simple in-memory backend for:
- Unit tests
- Integration tests of the HTTP layer
- Local development without a MongoDB deployment ("memory://" URIs)

Invariants:
    - All data is lost on process exit
    - Documents are deep-copied on the way in and out
    - Duplicate _id values are rejected like a unique _id index would

How to change safely:
    - This is test-only code, changes don't affect production
    - Keep interface compatible with DocumentStore protocol
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from bson import ObjectId

from ..errors import ConnectivityError, DuplicateKeyError
from ..identifiers import ID_FIELD
from ..types import Namespace
from .base import Document, SortSpec

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """In-memory implementation of DocumentStore for testing.

    Insert is all-or-nothing: a batch with any conflicting _id is rejected
    before anything is written, and the error reports zero insertions.

    Attributes:
        reachable: When False, connect() fails like an unreachable server

    Example:
        >>> store = InMemoryDocumentStore()
        >>> store.seed(Namespace("shop", "orders"), [{"title": "a"}])
        >>> await store.connect()
        >>> await store.find(Namespace("shop", "orders"))
    """

    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable
        self._databases: dict[str, dict[str, list[Document]]] = {}
        self._connected = False
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        if not self.reachable:
            raise ConnectivityError("In-memory store is unreachable", address="memory://")
        self._connected = True
        logger.debug("InMemoryDocumentStore connected")

    async def close(self) -> None:
        self._connected = False
        logger.debug("InMemoryDocumentStore closed")

    async def list_databases(self) -> list[str]:
        self._check_connected()
        return [name for name, collections in self._databases.items() if collections]

    async def list_collections(self, database: str) -> list[str]:
        self._check_connected()
        return list(self._databases.get(database, {}))

    async def find(
        self,
        namespace: Namespace,
        filter: Mapping[str, Any] | None = None,
        projection: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> list[Document]:
        self._check_connected()
        documents = [
            doc for doc in self._collection_docs(namespace) if _matches(doc, filter or {})
        ]
        for field, direction in reversed(list(sort or [])):
            documents.sort(key=lambda doc: _sort_key(doc.get(field)), reverse=direction < 0)
        return [_project(doc, projection) for doc in documents]

    async def find_one(
        self,
        namespace: Namespace,
        filter: Mapping[str, Any],
    ) -> Document | None:
        self._check_connected()
        for doc in self._collection_docs(namespace):
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def insert_many(
        self,
        namespace: Namespace,
        documents: Sequence[Document],
    ) -> int:
        self._check_connected()
        async with self._lock:
            collection = self._databases.setdefault(namespace.database, {}).setdefault(
                namespace.collection, []
            )
            existing = {doc[ID_FIELD] for doc in collection}
            batch = []
            for doc in documents:
                doc = copy.deepcopy(dict(doc))
                doc.setdefault(ID_FIELD, ObjectId())
                if doc[ID_FIELD] in existing:
                    raise DuplicateKeyError(str(namespace), inserted_count=0)
                existing.add(doc[ID_FIELD])
                batch.append(doc)
            collection.extend(batch)

        logger.debug(
            "Documents inserted into in-memory store",
            extra={"namespace": str(namespace), "count": len(batch)},
        )
        return len(batch)

    def _check_connected(self) -> None:
        if not self._connected:
            raise ConnectivityError("Not connected", address="memory://")

    def _collection_docs(self, namespace: Namespace) -> list[Document]:
        return self._databases.get(namespace.database, {}).get(namespace.collection, [])

    # Testing helpers

    def seed(self, namespace: Namespace, documents: Sequence[Document]) -> list[Document]:
        """Store documents without a connection (testing helper).

        Documents without an _id get a fresh ObjectId. Returns the stored copies.
        """
        collection = self._databases.setdefault(namespace.database, {}).setdefault(
            namespace.collection, []
        )
        stored = []
        for doc in documents:
            doc = copy.deepcopy(dict(doc))
            doc.setdefault(ID_FIELD, ObjectId())
            collection.append(doc)
            stored.append(copy.deepcopy(doc))
        return stored

    def create_collection(self, namespace: Namespace) -> None:
        """Create an empty collection (testing helper)."""
        self._databases.setdefault(namespace.database, {}).setdefault(namespace.collection, [])

    def count(self, namespace: Namespace) -> int:
        """Number of documents in a collection (testing helper)."""
        return len(self._collection_docs(namespace))


def _matches(document: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    return all(key in document and document[key] == value for key, value in filter.items())


def _sort_key(value: Any) -> tuple[str, Any]:
    # Group by type first so mixed-type fields never compare across types
    return (type(value).__name__, value)


def _project(document: Mapping[str, Any], projection: Mapping[str, Any] | None) -> Document:
    if not projection:
        return copy.deepcopy(dict(document))
    included = {key for key, flag in projection.items() if flag and key != ID_FIELD}
    keep_id = projection.get(ID_FIELD, 1)
    projected = {}
    if keep_id and ID_FIELD in document:
        projected[ID_FIELD] = document[ID_FIELD]
    for key in included:
        if key in document:
            projected[key] = document[key]
    return copy.deepcopy(projected)
