"""
Namespace catalog: which databases and collections exist, and which of
them already have snapshots on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import NamespaceNotFoundError
from .snapshot.snapshot_store import SnapshotStore, run_file_io
from .store import DocumentStore
from .types import Namespace

logger = logging.getLogger(__name__)

RESERVED_DATABASES = frozenset({"admin", "local"})


@dataclass
class CollectionEntry:
    """One collection plus its snapshot files.

    Attributes:
        namespace: Database and collection
        has_snapshots: Whether a snapshot directory exists
        snapshots: Snapshot file names in the directory
    """

    namespace: Namespace
    has_snapshots: bool
    snapshots: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.namespace.collection


class NamespaceCatalog:
    """Read-only listing of databases and collections."""

    def __init__(
        self,
        store: DocumentStore,
        snapshot_store: SnapshotStore,
        file_io_timeout: float | None = None,
    ) -> None:
        self.store = store
        self.snapshot_store = snapshot_store
        self.file_io_timeout = file_io_timeout

    async def list_databases(self) -> list[str]:
        """Database names, without the administrative ones.

        Raises:
            ConnectivityError: If the store is unreachable
        """
        names = await self.store.list_databases()
        return [name for name in names if name not in RESERVED_DATABASES]

    async def list_collections(self, database: str) -> list[CollectionEntry]:
        """Collections of database annotated with their snapshots.

        Raises:
            NamespaceNotFoundError: If database does not exist
            ConnectivityError: If the store is unreachable
            StorageWriteError: If reading the snapshot tree exceeds its deadline
        """
        if database not in await self.store.list_databases():
            raise NamespaceNotFoundError(database)

        entries = []
        for collection in await self.store.list_collections(database):
            namespace = Namespace(database, collection)
            has_snapshots = await run_file_io(
                self.snapshot_store.has_namespace_dir, namespace, timeout=self.file_io_timeout
            )
            snapshots = await run_file_io(
                self.snapshot_store.list_snapshots, namespace, timeout=self.file_io_timeout
            )
            entries.append(
                CollectionEntry(namespace=namespace, has_snapshots=has_snapshots, snapshots=snapshots)
            )
        logger.debug(
            "Listed collections",
            extra={"database": database, "count": len(entries)},
        )
        return entries
