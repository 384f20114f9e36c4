"""
MongoDB document store backend.

Wraps pymongo's AsyncMongoClient. A single client (and its connection pool)
is shared by every request; the core never touches pool state itself.

Timeouts:
    - serverSelectionTimeoutMS bounds how long an unreachable deployment blocks
    - timeoutMS bounds every individual operation (client side)
    Both surface as ConnectivityError(timeout=True).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from pymongo import AsyncMongoClient
from pymongo import errors as mongo_errors

from ..config import redact_uri
from ..errors import ConnectivityError, DocSnapError, DuplicateKeyError
from ..types import Namespace
from .base import Document, SortSpec

logger = logging.getLogger(__name__)

DUPLICATE_KEY_CODES = frozenset({11000, 11001, 12582})


class MongoDocumentStore:
    """DocumentStore backed by a MongoDB deployment.

    Attributes:
        uri: Connection URI
        max_pool_size: Maximum pooled connections
        timeout_ms: Client-side per-operation timeout
        server_selection_timeout_ms: Server selection timeout
    """

    def __init__(
        self,
        uri: str,
        max_pool_size: int = 10,
        timeout_ms: int = 30000,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        self.uri = uri
        self.max_pool_size = max_pool_size
        self.timeout_ms = timeout_ms
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client: AsyncMongoClient | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def address(self) -> str:
        return redact_uri(self.uri)

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the client and verify the deployment answers a ping."""
        if self._client is not None:
            return

        async with self._connect_lock:
            # Another task may have connected while this one waited
            if self._client is not None:
                return

            with self._translate_errors():
                client: AsyncMongoClient = AsyncMongoClient(
                    self.uri,
                    maxPoolSize=self.max_pool_size,
                    timeoutMS=self.timeout_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                )
                try:
                    await client.admin.command("ping")
                except mongo_errors.PyMongoError:
                    await client.close()
                    raise

            self._client = client
        logger.info("Connected to document store", extra={"address": self.address})

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("Closed document store connection", extra={"address": self.address})

    async def list_databases(self) -> list[str]:
        client = self._require_client()
        with self._translate_errors():
            return await client.list_database_names()

    async def list_collections(self, database: str) -> list[str]:
        client = self._require_client()
        with self._translate_errors():
            return await client[database].list_collection_names()

    async def find(
        self,
        namespace: Namespace,
        filter: Mapping[str, Any] | None = None,
        projection: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> list[Document]:
        collection = self._collection(namespace)
        with self._translate_errors(namespace):
            cursor = collection.find(dict(filter or {}), dict(projection) if projection else None)
            if sort:
                cursor = cursor.sort(list(sort))
            return await cursor.to_list(None)

    async def find_one(
        self,
        namespace: Namespace,
        filter: Mapping[str, Any],
    ) -> Document | None:
        collection = self._collection(namespace)
        with self._translate_errors(namespace):
            return await collection.find_one(dict(filter))

    async def insert_many(
        self,
        namespace: Namespace,
        documents: Sequence[Document],
    ) -> int:
        if not documents:
            return 0
        collection = self._collection(namespace)
        with self._translate_errors(namespace):
            result = await collection.insert_many(list(documents), ordered=True)
        return len(result.inserted_ids)

    def _require_client(self) -> AsyncMongoClient:
        if self._client is None:
            raise ConnectivityError("Not connected", address=self.address)
        return self._client

    def _collection(self, namespace: Namespace) -> Any:
        return self._require_client()[namespace.database][namespace.collection]

    @contextmanager
    def _translate_errors(self, namespace: Namespace | None = None) -> Iterator[None]:
        try:
            yield
        except mongo_errors.PyMongoError as e:
            raise translate_error(e, namespace, self.address) from e


def translate_error(
    error: mongo_errors.PyMongoError,
    namespace: Namespace | None,
    address: str | None = None,
) -> DocSnapError:
    """Map a pymongo exception onto the docsnap error taxonomy."""
    target = str(namespace) if namespace else ""

    if isinstance(error, mongo_errors.BulkWriteError):
        details = error.details or {}
        write_errors = details.get("writeErrors", [])
        if any(item.get("code") in DUPLICATE_KEY_CODES for item in write_errors):
            return DuplicateKeyError(target, inserted_count=details.get("nInserted", 0))
        return DocSnapError(
            f"Bulk write failed on {target}: {write_errors[:1]}",
            code="STORE_WRITE_FAILED",
            details={"inserted_count": details.get("nInserted", 0)},
        )

    if isinstance(error, mongo_errors.DuplicateKeyError):
        return DuplicateKeyError(target, inserted_count=0)

    if isinstance(error, (mongo_errors.ConnectionFailure, mongo_errors.ConfigurationError)):
        return ConnectivityError(str(error), address=address, timeout=error.timeout)

    if error.timeout:
        return ConnectivityError(str(error), address=address, timeout=True)

    return DocSnapError(str(error), code="STORE_ERROR", details={"namespace": target})
