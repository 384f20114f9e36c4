"""
Snapshot writer for docsnap.

Creates a dated JSON snapshot of one collection:
1. Read every document through the ItemReader (full projection)
2. Hand the result to the SnapshotStore for an atomic write

Invariants:
    - Nothing touches the disk until the full read has succeeded
    - Read failures surface as ConnectivityError, write failures as
      StorageWriteError, so callers can tell the phases apart
    - A second snapshot on the same day replaces the first; if that write
      fails, the earlier file for the day is left as it was

How to change safely:
    - Keep the clock injectable; tests pin the snapshot date through it
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from ..reader import ItemReader
from ..types import Namespace, ProjectionMode
from .snapshot_store import SnapshotStore, run_file_io

logger = logging.getLogger(__name__)


@dataclass
class SnapshotInfo:
    """Information about a written snapshot.

    Attributes:
        namespace: Database and collection
        filename: Snapshot file name
        path: Full path on disk
        snapshot_date: Capture date
        document_count: Number of documents written
        size_bytes: File size in bytes
    """

    namespace: Namespace
    filename: str
    path: Path
    snapshot_date: date
    document_count: int
    size_bytes: int


class SnapshotWriter:
    """Creates snapshots on demand.

    Example:
        >>> writer = SnapshotWriter(reader, snapshot_store)
        >>> info = await writer.create_snapshot(Namespace("shop", "orders"))
        >>> print(info.filename)
    """

    def __init__(
        self,
        reader: ItemReader,
        snapshot_store: SnapshotStore,
        today: Callable[[], date] = date.today,
        file_io_timeout: float | None = None,
    ) -> None:
        """Initialize the writer.

        Args:
            reader: Reader over the source store
            snapshot_store: Destination file layout
            today: Clock giving the snapshot date
            file_io_timeout: Deadline in seconds for the file write
        """
        self.reader = reader
        self.snapshot_store = snapshot_store
        self.today = today
        self.file_io_timeout = file_io_timeout

    async def create_snapshot(
        self,
        namespace: Namespace,
        snapshot_date: date | None = None,
    ) -> SnapshotInfo:
        """Snapshot every document of namespace.

        Args:
            namespace: Collection to snapshot
            snapshot_date: Date to file the snapshot under (defaults to today)

        Returns:
            SnapshotInfo for the written file

        Raises:
            ConnectivityError: If reading from the store fails
            StorageWriteError: If writing the file fails
        """
        start_time = time.time()
        snapshot_date = snapshot_date or self.today()

        documents = await self.reader.find_many(namespace, ProjectionMode.FULL)

        path = await run_file_io(
            self.snapshot_store.write_snapshot,
            namespace,
            documents,
            snapshot_date,
            timeout=self.file_io_timeout,
        )

        info = SnapshotInfo(
            namespace=namespace,
            filename=path.name,
            path=path,
            snapshot_date=snapshot_date,
            document_count=len(documents),
            size_bytes=path.stat().st_size,
        )
        logger.info(
            "Created snapshot",
            extra={
                "namespace": str(namespace),
                "filename": info.filename,
                "document_count": info.document_count,
                "size_bytes": info.size_bytes,
                "duration_ms": int((time.time() - start_time) * 1000),
            },
        )
        return info
