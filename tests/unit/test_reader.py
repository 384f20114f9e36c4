"""
Unit tests for ItemReader.

Tests cover:
- Single-document lookup
- Full and summary collection reads
- Newest-first ordering
"""

import pytest
from bson import ObjectId

from docsnap.errors import InvalidIdentifierError, NotFoundError
from docsnap.reader import ItemReader
from docsnap.store import InMemoryDocumentStore
from docsnap.types import Namespace, ProjectionMode


def oid(n: int) -> ObjectId:
    return ObjectId(f"{n:024x}")


class TestItemReader:
    """Tests for ItemReader."""

    @pytest.fixture
    def store(self, orders):
        store = InMemoryDocumentStore()
        store.seed(
            orders,
            [
                {"_id": oid(1), "creation_date": "2024-01-01", "title": "A", "total": 10},
                {"_id": oid(2), "creation_date": "2024-01-02", "title": "B", "total": 20},
                {"_id": oid(3), "title": "C", "total": 30},
            ],
        )
        return store

    @pytest.fixture
    def reader(self, store):
        return ItemReader(store)

    @pytest.mark.asyncio
    async def test_find_one(self, store, reader, orders):
        await store.connect()
        doc = await reader.find_one(orders, f"{2:024x}")
        assert doc == {"_id": oid(2), "creation_date": "2024-01-02", "title": "B", "total": 20}

    @pytest.mark.asyncio
    async def test_find_one_missing(self, store, reader, orders):
        await store.connect()
        with pytest.raises(NotFoundError) as exc_info:
            await reader.find_one(orders, f"{99:024x}")
        assert exc_info.value.code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_find_one_malformed_identifier(self, store, reader, orders):
        """Malformed identifiers fail before the store is queried."""
        await store.connect()
        with pytest.raises(InvalidIdentifierError):
            await reader.find_one(orders, "12345")

    @pytest.mark.asyncio
    async def test_find_many_full_newest_first(self, store, reader, orders):
        await store.connect()
        docs = await reader.find_many(orders)

        assert [doc["title"] for doc in docs] == ["C", "B", "A"]
        assert docs[0] == {"_id": oid(3), "title": "C", "total": 30}

    @pytest.mark.asyncio
    async def test_find_many_summary(self, store, reader, orders):
        """Summary keeps only creation_date, title and the item reference."""
        await store.connect()
        docs = await reader.find_many(orders, ProjectionMode.SUMMARY)

        assert docs == [
            {"title": "C", "item": f"{3:024x}"},
            {"creation_date": "2024-01-02", "title": "B", "item": f"{2:024x}"},
            {"creation_date": "2024-01-01", "title": "A", "item": f"{1:024x}"},
        ]

    @pytest.mark.asyncio
    async def test_find_many_empty(self, reader, store):
        await store.connect()
        assert await reader.find_many(Namespace("shop", "empty")) == []
