"""
Unit tests for NamespaceCatalog.
"""

import asyncio
import threading
import time
from datetime import date

import pytest

from docsnap.catalog import NamespaceCatalog
from docsnap.errors import NamespaceNotFoundError, StorageWriteError
from docsnap.store import InMemoryDocumentStore
from docsnap.types import Namespace


class TestNamespaceCatalog:
    """Tests for NamespaceCatalog."""

    @pytest.fixture
    def store(self):
        store = InMemoryDocumentStore()
        store.seed(Namespace("admin", "system.users"), [{"user": "root"}])
        store.seed(Namespace("local", "startup_log"), [{"host": "db"}])
        store.seed(Namespace("shop", "orders"), [{"title": "a"}])
        store.create_collection(Namespace("shop", "users"))
        store.seed(Namespace("blog", "posts"), [{"title": "hello"}])
        return store

    @pytest.fixture
    def catalog(self, store, snapshot_store):
        return NamespaceCatalog(store, snapshot_store)

    @pytest.mark.asyncio
    async def test_list_databases_hides_reserved(self, store, catalog):
        """admin and local are never listed."""
        await store.connect()
        assert await catalog.list_databases() == ["shop", "blog"]

    @pytest.mark.asyncio
    async def test_list_collections_with_snapshots(self, store, catalog, snapshot_store):
        """Collections report whether and which snapshots exist."""
        snapshot_store.write_snapshot(Namespace("shop", "orders"), [], date(2024, 1, 5))
        await store.connect()

        entries = await catalog.list_collections("shop")

        assert [entry.name for entry in entries] == ["orders", "users"]
        orders, users = entries
        assert orders.has_snapshots
        assert orders.snapshots == ["shop-orders-2024-01-05.json"]
        assert not users.has_snapshots
        assert users.snapshots == []

    @pytest.mark.asyncio
    async def test_list_collections_unknown_database(self, store, catalog):
        await store.connect()
        with pytest.raises(NamespaceNotFoundError) as exc_info:
            await catalog.list_collections("nope")
        assert exc_info.value.database == "nope"

    @pytest.mark.asyncio
    async def test_snapshot_listing_runs_off_the_event_loop(
        self, store, catalog, snapshot_store, monkeypatch
    ):
        """Directory reads happen in the executor, not on the loop thread."""
        threads = []
        list_snapshots = snapshot_store.list_snapshots

        def recording_list_snapshots(namespace):
            threads.append(threading.current_thread())
            return list_snapshots(namespace)

        monkeypatch.setattr(snapshot_store, "list_snapshots", recording_list_snapshots)
        await store.connect()

        await catalog.list_collections("shop")

        assert len(threads) == 2
        assert threading.main_thread() not in threads

    @pytest.mark.asyncio
    async def test_slow_snapshot_listing_times_out(self, store, snapshot_store, monkeypatch):
        def slow_list_snapshots(namespace):
            time.sleep(0.2)
            return []

        monkeypatch.setattr(snapshot_store, "list_snapshots", slow_list_snapshots)
        catalog = NamespaceCatalog(store, snapshot_store, file_io_timeout=0.01)
        await store.connect()

        with pytest.raises(StorageWriteError) as exc_info:
            await catalog.list_collections("shop")
        assert exc_info.value.timeout
        # let the executor thread finish before the loop closes
        await asyncio.sleep(0.3)
