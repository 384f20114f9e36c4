"""
Unit tests for SnapshotWriter.
"""

import json
from datetime import date

import pytest
from bson import ObjectId

from docsnap.errors import ConnectivityError, StorageWriteError
from docsnap.reader import ItemReader
from docsnap.snapshot import SnapshotWriter
from docsnap.store import InMemoryDocumentStore
from docsnap.types import Namespace


class TestSnapshotWriter:
    """Tests for SnapshotWriter."""

    @pytest.fixture
    def store(self, orders):
        store = InMemoryDocumentStore()
        store.seed(
            orders,
            [
                {"_id": ObjectId(f"{1:024x}"), "title": "old"},
                {"_id": ObjectId(f"{2:024x}"), "title": "new"},
            ],
        )
        return store

    @pytest.fixture
    def writer(self, store, snapshot_store):
        return SnapshotWriter(ItemReader(store), snapshot_store, today=lambda: date(2024, 1, 5))

    @pytest.mark.asyncio
    async def test_create_snapshot(self, store, writer, orders):
        """The snapshot holds every document, newest first, ids as strings."""
        await store.connect()
        info = await writer.create_snapshot(orders)

        assert info.filename == "shop-orders-2024-01-05.json"
        assert info.snapshot_date == date(2024, 1, 5)
        assert info.document_count == 2
        assert info.size_bytes == info.path.stat().st_size
        assert json.loads(info.path.read_text()) == [
            {"_id": f"{2:024x}", "title": "new"},
            {"_id": f"{1:024x}", "title": "old"},
        ]

    @pytest.mark.asyncio
    async def test_explicit_date(self, store, writer, orders):
        await store.connect()
        info = await writer.create_snapshot(orders, snapshot_date=date(2023, 12, 31))
        assert info.filename == "shop-orders-2023-12-31.json"

    @pytest.mark.asyncio
    async def test_store_unreachable_writes_nothing(self, writer, orders, snapshot_store):
        """No directory or file appears when the read fails."""
        with pytest.raises(ConnectivityError):
            await writer.create_snapshot(orders)
        assert not snapshot_store.has_namespace_dir(orders)

    @pytest.mark.asyncio
    async def test_blocked_directory_is_storage_error(
        self, store, writer, orders, snapshot_store, backups_dir
    ):
        """A file squatting on the namespace directory fails the write cleanly."""
        blocker = backups_dir / orders.dir_name
        blocker.write_text("not a directory")
        await store.connect()

        with pytest.raises(StorageWriteError) as exc_info:
            await writer.create_snapshot(orders)

        assert exc_info.value.code == "STORAGE_WRITE_FAILED"
        assert blocker.read_text() == "not a directory"
        assert snapshot_store.list_snapshots(orders) == []

    @pytest.mark.asyncio
    async def test_colliding_namespace_writes_nothing(self, store, writer, snapshot_store):
        """a/b-c cannot snapshot into the directory a-b/c already owns."""
        owner = Namespace("a-b", "c")
        other = Namespace("a", "b-c")
        store.seed(other, [{"_id": ObjectId(f"{3:024x}"), "title": "x"}])
        ns_dir = snapshot_store.ensure_namespace_dir(owner)
        await store.connect()

        with pytest.raises(StorageWriteError):
            await writer.create_snapshot(other)

        assert not (ns_dir / other.snapshot_filename(date(2024, 1, 5))).exists()
        assert snapshot_store.list_snapshots(owner) == []
