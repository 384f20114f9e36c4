"""
Error types for docsnap.

Every component raises one of these instead of leaking driver or OS errors:
- DocSnapError: Base exception
- ConnectivityError: Document store unreachable or timed out
- NamespaceNotFoundError: Database does not exist
- InvalidNamespaceError: Database/collection name unusable as a namespace
- NotFoundError: Single-document lookup miss
- InvalidIdentifierError: Identifier string cannot be turned into an ObjectId
- SnapshotNotFoundError: Snapshot file does not exist
- CorruptSnapshotError: Snapshot file content is not a JSON document array
- StorageWriteError: Filesystem failure while writing snapshots
- DuplicateKeyError: Restore target already holds one of the identifiers

Invariants:
    - All errors inherit from DocSnapError
    - Each error has a stable code for programmatic handling
    - Details never contain credentials
"""

from __future__ import annotations

from typing import Any


class DocSnapError(Exception):
    """Base exception for all docsnap errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "DOCSNAP_ERROR"
        self.details = details or {}


class ConnectivityError(DocSnapError):
    """The document store could not be reached.

    Raised when:
    - Server selection fails
    - A store operation exceeds its timeout
    - The store handle is used before connect()
    """

    def __init__(
        self,
        message: str,
        address: str | None = None,
        timeout: bool = False,
    ) -> None:
        super().__init__(
            message,
            code="STORE_TIMEOUT" if timeout else "STORE_UNREACHABLE",
            details={"address": address, "timeout": timeout},
        )
        self.address = address
        self.timeout = timeout


class NamespaceNotFoundError(DocSnapError):
    """Database does not exist on the store."""

    def __init__(self, database: str) -> None:
        super().__init__(
            f"Database '{database}' not found",
            code="NAMESPACE_NOT_FOUND",
            details={"database": database},
        )
        self.database = database


class InvalidNamespaceError(DocSnapError):
    """Database or collection name is empty or not filesystem safe."""

    def __init__(self, message: str, database: str, collection: str) -> None:
        super().__init__(
            message,
            code="INVALID_NAMESPACE",
            details={"database": database, "collection": collection},
        )


class NotFoundError(DocSnapError):
    """No document matched a single-document lookup."""

    def __init__(self, namespace: str, identifier: str) -> None:
        super().__init__(
            f"Document {identifier} not found in {namespace}",
            code="NOT_FOUND",
            details={"namespace": namespace, "identifier": identifier},
        )
        self.namespace = namespace
        self.identifier = identifier


class InvalidIdentifierError(DocSnapError):
    """An identifier could not be converted to the store's native type."""

    def __init__(self, value: Any, position: int | None = None) -> None:
        message = f"Invalid identifier {value!r}"
        if position is not None:
            message += f" in document #{position}"
        super().__init__(
            message,
            code="INVALID_IDENTIFIER",
            details={"value": repr(value), "position": position},
        )
        self.value = value
        self.position = position


class SnapshotNotFoundError(DocSnapError):
    """Requested snapshot file does not exist."""

    def __init__(self, namespace: str, filename: str) -> None:
        super().__init__(
            f"Snapshot '{filename}' not found for {namespace}",
            code="SNAPSHOT_NOT_FOUND",
            details={"namespace": namespace, "filename": filename},
        )
        self.filename = filename


class CorruptSnapshotError(DocSnapError):
    """Snapshot file exists but cannot be parsed."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(
            f"Snapshot '{filename}' is corrupt: {reason}",
            code="CORRUPT_SNAPSHOT",
            details={"filename": filename, "reason": reason},
        )
        self.filename = filename
        self.reason = reason


class StorageWriteError(DocSnapError):
    """Snapshot storage could not be written.

    Raised when:
    - The disk is full or the directory is not writable
    - A namespace directory belongs to a different namespace
    - File I/O exceeded its deadline
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        timeout: bool = False,
    ) -> None:
        super().__init__(
            message,
            code="STORAGE_TIMEOUT" if timeout else "STORAGE_WRITE_FAILED",
            details={"path": path, "timeout": timeout},
        )
        self.path = path
        self.timeout = timeout


class DuplicateKeyError(DocSnapError):
    """Restore target already contains one of the restored identifiers.

    Attributes:
        inserted_count: Documents the store reports as inserted before rejecting
    """

    def __init__(self, namespace: str, inserted_count: int = 0) -> None:
        super().__init__(
            f"Duplicate identifier while inserting into {namespace} "
            f"({inserted_count} documents inserted before the conflict)",
            code="DUPLICATE_KEY",
            details={"namespace": namespace, "inserted_count": inserted_count},
        )
        self.namespace = namespace
        self.inserted_count = inserted_count
