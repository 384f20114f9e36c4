"""
On-disk snapshot layout for docsnap.

Snapshot format:
    <root>/<database>-<collection>/<database>-<collection>-<YYYY-MM-DD>.json

Each file is a JSON array of documents whose identifiers are stored in
their serialized string form. Each namespace directory also carries a
hidden `.namespace` marker naming the (database, collection) that owns it.

Invariants:
    - SnapshotStore is the only writer of the snapshot tree
    - Readers never observe a truncated file (write to temp, then rename)
    - At most one snapshot per namespace per day; a rewrite replaces it
    - A directory name shared by two namespaces ("a-b"/"c" and "a"/"b-c")
      is only ever used by the first one that claimed it

How to change safely:
    - Keep file names stable; restore links and download URLs embed them
    - Hidden files (leading dot) are never listed as snapshots
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import json
import logging
import os
import uuid
from collections.abc import Callable, Sequence
from datetime import date
from pathlib import Path
from typing import Any, TypeVar

from .. import codec
from ..errors import CorruptSnapshotError, SnapshotNotFoundError, StorageWriteError
from ..types import SNAPSHOT_SUFFIX, Namespace

logger = logging.getLogger(__name__)

MARKER_NAME = ".namespace"

T = TypeVar("T")


class SnapshotStore:
    """Owns the snapshot directory tree.

    Methods are blocking; async callers go through run_file_io().

    Attributes:
        root_dir: Root directory holding one directory per namespace
    """

    def __init__(self, root_dir: str | Path) -> None:
        """Initialize the store, creating root_dir if needed.

        Raises:
            StorageWriteError: If the root directory cannot be created
        """
        self.root_dir = Path(root_dir)
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageWriteError(
                f"Cannot create snapshot root {self.root_dir}: {e}",
                path=str(self.root_dir),
            ) from e

    def namespace_dir(self, namespace: Namespace) -> Path:
        return self.root_dir / namespace.dir_name

    def has_namespace_dir(self, namespace: Namespace) -> bool:
        ns_dir = self.namespace_dir(namespace)
        return ns_dir.is_dir() and self._owned_by(namespace, ns_dir)

    def snapshot_path(self, namespace: Namespace, filename: str) -> Path:
        """Resolve a snapshot file name inside the namespace directory.

        Raises:
            SnapshotNotFoundError: If filename is not a plain visible file name
        """
        if (
            not filename
            or filename.startswith(".")
            or any(sep in filename for sep in ("/", "\\", "\x00"))
        ):
            raise SnapshotNotFoundError(str(namespace), filename)
        ns_dir = self.namespace_dir(namespace)
        if not self._owned_by(namespace, ns_dir):
            raise SnapshotNotFoundError(str(namespace), filename)
        return ns_dir / filename

    def ensure_namespace_dir(self, namespace: Namespace) -> Path:
        """Create and claim the namespace directory. Safe to call repeatedly.

        Returns:
            Path of the namespace directory

        Raises:
            StorageWriteError: If the directory cannot be created or claimed,
                or it is owned by another namespace
        """
        ns_dir = self.namespace_dir(namespace)
        created = False
        try:
            ns_dir.mkdir()
            created = True
        except FileExistsError:
            if not ns_dir.is_dir():
                raise StorageWriteError(
                    f"{ns_dir} exists and is not a directory", path=str(ns_dir)
                ) from None
        except OSError as e:
            raise StorageWriteError(f"Cannot create {ns_dir}: {e}", path=str(ns_dir)) from e

        try:
            self._claim(namespace, ns_dir)
        except StorageWriteError:
            if created:
                self._discard_dir(ns_dir)
            raise

        if created:
            logger.info(
                "Created namespace directory",
                extra={"namespace": str(namespace), "path": str(ns_dir)},
            )
        return ns_dir

    def write_snapshot(
        self,
        namespace: Namespace,
        documents: Sequence[dict[str, Any]],
        snapshot_date: date,
    ) -> Path:
        """Serialize documents and atomically write the day's snapshot file.

        Returns:
            Path of the written snapshot

        Raises:
            StorageWriteError: If the file cannot be written
        """
        ns_dir = self.ensure_namespace_dir(namespace)
        path = ns_dir / namespace.snapshot_filename(snapshot_date)
        payload = codec.dumps(documents)
        replaced = path.exists()

        _atomic_write(path, payload)

        if replaced:
            logger.warning(
                "Replaced existing snapshot for the same day",
                extra={"namespace": str(namespace), "path": str(path)},
            )
        logger.info(
            "Wrote snapshot",
            extra={
                "namespace": str(namespace),
                "path": str(path),
                "document_count": len(documents),
                "size_bytes": len(payload),
            },
        )
        return path

    def read_snapshot(self, namespace: Namespace, filename: str) -> list[dict[str, Any]]:
        """Load and parse a snapshot file.

        Raises:
            SnapshotNotFoundError: If the file does not exist
            CorruptSnapshotError: If the content is not a JSON array of objects
        """
        path = self.snapshot_path(namespace, filename)
        try:
            content = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise SnapshotNotFoundError(str(namespace), filename) from None
        except OSError as e:
            raise CorruptSnapshotError(filename, f"unreadable: {e}") from e

        try:
            data = codec.loads(content)
        except ValueError as e:
            raise CorruptSnapshotError(filename, str(e)) from e

        if not isinstance(data, list) or not all(isinstance(doc, dict) for doc in data):
            raise CorruptSnapshotError(filename, "expected a JSON array of objects")
        return data

    def list_snapshots(self, namespace: Namespace) -> list[str]:
        """Snapshot file names for a namespace; empty if none were ever taken."""
        ns_dir = self.namespace_dir(namespace)
        try:
            entries = list(ns_dir.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return []
        if not self._owned_by(namespace, ns_dir):
            return []
        return sorted(
            entry.name
            for entry in entries
            if not entry.name.startswith(".")
            and entry.name.endswith(SNAPSHOT_SUFFIX)
            and entry.is_file()
        )

    def _owned_by(self, namespace: Namespace, ns_dir: Path) -> bool:
        # Unclaimed directories are readable by any namespace mapping to them
        marker = ns_dir / MARKER_NAME
        try:
            existing = json.loads(marker.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return True
        except (OSError, ValueError):
            return False
        return existing == _owner(namespace)

    def _claim(self, namespace: Namespace, ns_dir: Path) -> None:
        marker = ns_dir / MARKER_NAME
        owner = _owner(namespace)

        if not marker.exists():
            _atomic_write(marker, json.dumps(owner).encode("utf-8"))
            return

        try:
            existing = json.loads(marker.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageWriteError(f"Unreadable marker {marker}: {e}", path=str(marker)) from e
        if existing != owner:
            raise StorageWriteError(
                f"{ns_dir} already holds snapshots of another namespace ({existing!r})",
                path=str(ns_dir),
            )

    def _discard_dir(self, ns_dir: Path) -> None:
        for entry in ns_dir.iterdir():
            with contextlib.suppress(OSError):
                entry.unlink()
        try:
            ns_dir.rmdir()
        except OSError as e:
            logger.warning(f"Could not remove half-created directory {ns_dir}: {e}")


def _owner(namespace: Namespace) -> dict[str, str]:
    return {"database": namespace.database, "collection": namespace.collection}


def _atomic_write(path: Path, data: bytes) -> None:
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise StorageWriteError(f"Failed to write {path}: {e}", path=str(path)) from e


async def run_file_io(
    func: Callable[..., T],
    *args: Any,
    timeout: float | None = None,
) -> T:
    """Run blocking snapshot I/O in the default executor under a deadline.

    Raises:
        StorageWriteError: With timeout=True if the deadline passes
    """
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, functools.partial(func, *args))
    try:
        return await asyncio.wait_for(future, timeout)
    except asyncio.TimeoutError:
        raise StorageWriteError(
            f"File operation {getattr(func, '__name__', func)} exceeded {timeout}s",
            timeout=True,
        ) from None
