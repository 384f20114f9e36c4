"""
Restore pipeline and CLI tool for docsnap.

Replays a snapshot file into a target store, usually a local instance that
is not the deployment the snapshot came from:
1. Connect - open the target store
2. Load - read and parse the snapshot file
3. Rehydrate - turn every serialized _id back into an ObjectId
4. Insert - bulk insert into the target collection

Usage:
    docsnap-restore --database <db> --collection <col> --file <name> [options]

Invariants:
    - Stages run in order; the first failure aborts the pipeline
    - A malformed identifier rejects the whole batch before any insert
    - Only ObjectId identifiers are restorable; any other _id type is malformed
    - The loaded snapshot is never mutated
    - Indexes are not recreated; the result message says so

How to change safely:
    - Keep the target store an explicit argument so tests can pass fakes
    - Nothing is rolled back: inserts the store already committed stay
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config import Settings, redact_uri
from ..errors import DocSnapError, InvalidIdentifierError
from ..identifiers import ID_FIELD, identifier_of, to_native
from ..logging_config import setup_logging
from ..snapshot.snapshot_store import SnapshotStore, run_file_io
from ..store import DocumentStore, create_document_store
from ..types import Namespace

logger = logging.getLogger(__name__)

INDEX_REMINDER = "Indexes are not recreated by restore; create them on the target collection."


class RestoreStage(Enum):
    """Stages of the restore pipeline, in execution order."""

    CONNECT = "connect"
    LOAD = "load"
    REHYDRATE = "rehydrate"
    INSERT = "insert"


@dataclass
class RestoreResult:
    """Result of a successful restore.

    Attributes:
        namespace: Target database and collection
        filename: Snapshot that was replayed
        inserted_count: Documents inserted into the target
        duration_ms: Total restore duration
        message: Human readable summary, including the index reminder
    """

    namespace: Namespace
    filename: str
    inserted_count: int
    duration_ms: int
    message: str


def rehydrate_documents(documents: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Return copies of documents with native ObjectId identifiers.

    Raises:
        InvalidIdentifierError: On the first missing or malformed _id
    """
    rehydrated = []
    for position, document in enumerate(documents):
        if ID_FIELD not in document:
            raise InvalidIdentifierError(None, position)
        native = to_native(identifier_of(document[ID_FIELD]), position)
        rehydrated.append({**document, ID_FIELD: native})
    return rehydrated


class RestorePipeline:
    """Connect -> Load -> Rehydrate -> Insert.

    Example:
        >>> pipeline = RestorePipeline(snapshot_store)
        >>> result = await pipeline.restore(namespace, "shop-orders-2024-01-05.json", target)
        >>> print(result.inserted_count)
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        file_io_timeout: float | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            snapshot_store: Source of snapshot files
            file_io_timeout: Deadline in seconds for reading the snapshot
        """
        self.snapshot_store = snapshot_store
        self.file_io_timeout = file_io_timeout

    async def restore(
        self,
        namespace: Namespace,
        filename: str,
        target: DocumentStore,
    ) -> RestoreResult:
        """Replay a snapshot into target.

        Args:
            namespace: Namespace the snapshot belongs to; also the target
                database and collection
            filename: Snapshot file name within the namespace directory
            target: Store to insert into

        Returns:
            RestoreResult with the inserted count

        Raises:
            ConnectivityError: Connect stage failed
            SnapshotNotFoundError: Load stage, file missing
            CorruptSnapshotError: Load stage, unparseable file
            InvalidIdentifierError: Rehydrate stage, bad _id
            DuplicateKeyError: Insert stage, _id already present in target
        """
        start_time = time.time()
        stage = RestoreStage.CONNECT
        context = {"namespace": str(namespace), "filename": filename}

        try:
            await target.connect()

            stage = RestoreStage.LOAD
            documents = await run_file_io(
                self.snapshot_store.read_snapshot,
                namespace,
                filename,
                timeout=self.file_io_timeout,
            )
            logger.info(f"Loaded {len(documents)} documents from snapshot", extra=context)

            stage = RestoreStage.REHYDRATE
            rehydrated = rehydrate_documents(documents)

            stage = RestoreStage.INSERT
            inserted_count = await target.insert_many(namespace, rehydrated)

        except DocSnapError as e:
            logger.error(
                f"Restore failed at {stage.value} stage: {e.message}",
                extra={**context, "stage": stage.value, "error_code": e.code},
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Restore completed",
            extra={**context, "inserted_count": inserted_count, "duration_ms": duration_ms},
        )
        return RestoreResult(
            namespace=namespace,
            filename=filename,
            inserted_count=inserted_count,
            duration_ms=duration_ms,
            message=f"Successfully inserted {inserted_count} items. {INDEX_REMINDER}",
        )


async def _run(args: argparse.Namespace, settings: Settings) -> RestoreResult:
    namespace = Namespace(args.database, args.collection)
    pipeline = RestorePipeline(
        SnapshotStore(args.backups_dir or settings.backups_dir),
        file_io_timeout=settings.file_io_timeout_seconds,
    )
    target = create_document_store(args.target_uri or settings.restore_target_uri, settings)
    try:
        return await pipeline.restore(namespace, args.file, target)
    finally:
        await target.close()


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for restore tool."""
    parser = argparse.ArgumentParser(
        description="Restore a docsnap collection snapshot into a target MongoDB"
    )
    parser.add_argument("--database", required=True, help="Database the snapshot belongs to")
    parser.add_argument("--collection", required=True, help="Collection the snapshot belongs to")
    parser.add_argument("--file", required=True, help="Snapshot file name")
    parser.add_argument("--target-uri", help="Target store URI (default: restore_target_uri)")
    parser.add_argument("--backups-dir", help="Snapshot root directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    settings = Settings(log_level="DEBUG" if args.verbose else "INFO", log_format="text")
    setup_logging(settings)

    try:
        result = asyncio.run(_run(args, settings))
    except DocSnapError as e:
        print(f"Restore failed: {e.message}")
        sys.exit(1)

    print("Restore completed successfully")
    print(f"  Target: {redact_uri(args.target_uri or settings.restore_target_uri)}")
    print(f"  Namespace: {result.namespace}")
    print(f"  Inserted: {result.inserted_count}")
    print(f"  Duration: {result.duration_ms}ms")
    print(f"  {INDEX_REMINDER}")
    sys.exit(0)


if __name__ == "__main__":
    main()
