"""
Backup service: wires the catalog, reader, snapshot writer and restore
pipeline around one source store and one restore-target store.

Transports (HTTP routes, CLIs) call this class and nothing below it, so
every operation has a single transport-agnostic entry point:

    list-databases, list-collections, read-item, read-collection,
    create-backup, restore-backup

Invariants:
    - The source store is connected for the service's whole lifetime
    - The restore target is connected lazily by the restore pipeline
    - Both stores are shared by concurrent requests; nothing here locks
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from .catalog import CollectionEntry, NamespaceCatalog
from .config import Settings
from .reader import ItemReader
from .snapshot import SnapshotInfo, SnapshotStore, SnapshotWriter
from .store import Document, DocumentStore, create_document_store
from .tools.restore import RestorePipeline, RestoreResult
from .types import Namespace, ProjectionMode

logger = logging.getLogger(__name__)


class BackupService:
    """Composition root for all docsnap operations.

    Attributes:
        settings: Loaded settings
        source: Store that is listed, read and snapshotted
        target: Store that snapshots are restored into
        snapshot_store: On-disk snapshot layout
    """

    def __init__(
        self,
        settings: Settings,
        source: DocumentStore,
        target: DocumentStore,
        snapshot_store: SnapshotStore | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings
        self.source = source
        self.target = target
        self.snapshot_store = snapshot_store or SnapshotStore(settings.backups_dir)

        self.catalog = NamespaceCatalog(
            source,
            self.snapshot_store,
            file_io_timeout=settings.file_io_timeout_seconds,
        )
        self.reader = ItemReader(source)
        self.writer = SnapshotWriter(
            self.reader,
            self.snapshot_store,
            today=today,
            file_io_timeout=settings.file_io_timeout_seconds,
        )
        self.restore_pipeline = RestorePipeline(
            self.snapshot_store,
            file_io_timeout=settings.file_io_timeout_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> BackupService:
        """Build the service with stores chosen by the configured URIs."""
        return cls(
            settings,
            source=create_document_store(settings.mongodb_uri, settings),
            target=create_document_store(settings.restore_target_uri, settings),
        )

    async def start(self) -> None:
        """Connect to the source store."""
        await self.source.connect()
        logger.info("Backup service started")

    async def stop(self) -> None:
        """Close both stores."""
        await self.source.close()
        await self.target.close()
        logger.info("Backup service stopped")

    async def list_databases(self) -> list[str]:
        return await self.catalog.list_databases()

    async def list_collections(self, database: str) -> list[CollectionEntry]:
        return await self.catalog.list_collections(database)

    async def read_item(self, database: str, collection: str, identifier: str) -> Document:
        return await self.reader.find_one(Namespace(database, collection), identifier)

    async def read_collection(
        self,
        database: str,
        collection: str,
        mode: ProjectionMode,
    ) -> list[Document]:
        return await self.reader.find_many(Namespace(database, collection), mode)

    async def create_backup(self, database: str, collection: str) -> SnapshotInfo:
        return await self.writer.create_snapshot(Namespace(database, collection))

    async def restore_backup(self, database: str, collection: str, filename: str) -> RestoreResult:
        return await self.restore_pipeline.restore(
            Namespace(database, collection), filename, self.target
        )
