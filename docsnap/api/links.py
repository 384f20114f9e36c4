"""
Link presenter.

Builds the relation -> URL maps that make the API browsable. Everything
here is pure string formatting over a base URL; no I/O, no failure modes
beyond malformed input.
"""

from __future__ import annotations

from urllib.parse import quote

from ..catalog import CollectionEntry
from ..types import Namespace, ProjectionMode

RESTORE_FILE_PLACEHOLDER = "YYYY-MM-DD"


def _seg(value: str) -> str:
    return quote(value, safe="")


class LinkPresenter:
    """Affordance URLs for catalog and backup entities.

    Attributes:
        base_url: Absolute URL the API is reachable at, without trailing slash
    """

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def root_links(self) -> dict[str, str]:
        return {"list-databases": f"{self.base_url}/list-databases"}

    def database_links(self, database: str) -> dict[str, str]:
        return {"list-collections": f"{self.base_url}/list-collections/db/{_seg(database)}"}

    def collection_links(self, namespace: Namespace) -> dict[str, str]:
        """Links for one collection: item listings, backup, restore template."""
        db, col = _seg(namespace.database), _seg(namespace.collection)
        template = f"{namespace.dir_name}-{RESTORE_FILE_PLACEHOLDER}.json"
        return {
            "list-full-items": self.collection_items_url(namespace, ProjectionMode.FULL),
            "list-summary-items": self.collection_items_url(namespace, ProjectionMode.SUMMARY),
            "create-backup": f"{self.base_url}/create-backup/db/{db}/col/{col}",
            "restore-backup": self.restore_url(namespace, template),
        }

    def collection_items_url(self, namespace: Namespace, mode: ProjectionMode) -> str:
        db, col = _seg(namespace.database), _seg(namespace.collection)
        return f"{self.base_url}/read-col/db/{db}/col/{col}/itemsmode/{mode.value}"

    def backup_links(self, namespace: Namespace, filename: str) -> dict[str, str]:
        """Download and restore links for one snapshot file."""
        return {
            "file": filename,
            "download": self.download_url(namespace, filename),
            "restore": self.restore_url(namespace, filename),
        }

    def download_url(self, namespace: Namespace, filename: str) -> str:
        return f"{self.base_url}/{_seg(namespace.dir_name)}/{_seg(filename)}"

    def restore_url(self, namespace: Namespace, filename: str) -> str:
        db, col = _seg(namespace.database), _seg(namespace.collection)
        return f"{self.base_url}/upload-to-local-mongodb/db/{db}/col/{col}/file/{_seg(filename)}"

    def item_url(self, namespace: Namespace, identifier: str) -> str:
        db, col = _seg(namespace.database), _seg(namespace.collection)
        return f"{self.base_url}/read-item/db/{db}/col/{col}/id/{_seg(identifier)}"

    def collection_entry(self, entry: CollectionEntry) -> dict[str, object]:
        """Full presentation of a catalog entry."""
        return {
            "collection": entry.name,
            "backups": [self.backup_links(entry.namespace, name) for name in entry.snapshots],
            **self.collection_links(entry.namespace),
        }
