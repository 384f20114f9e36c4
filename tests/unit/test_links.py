"""
Unit tests for LinkPresenter.
"""

from docsnap.api.links import LinkPresenter
from docsnap.catalog import CollectionEntry
from docsnap.types import Namespace, ProjectionMode

BASE = "http://localhost:3000"
ORDERS = Namespace("shop", "orders")


class TestLinkPresenter:
    """Tests for LinkPresenter."""

    def test_trailing_slash_stripped(self):
        presenter = LinkPresenter(BASE + "/")
        assert presenter.root_links() == {"list-databases": f"{BASE}/list-databases"}

    def test_database_links(self):
        presenter = LinkPresenter(BASE)
        assert presenter.database_links("shop") == {
            "list-collections": f"{BASE}/list-collections/db/shop"
        }

    def test_collection_links(self):
        presenter = LinkPresenter(BASE)
        assert presenter.collection_links(ORDERS) == {
            "list-full-items": f"{BASE}/read-col/db/shop/col/orders/itemsmode/full",
            "list-summary-items": f"{BASE}/read-col/db/shop/col/orders/itemsmode/summary",
            "create-backup": f"{BASE}/create-backup/db/shop/col/orders",
            "restore-backup": (
                f"{BASE}/upload-to-local-mongodb/db/shop/col/orders/file/"
                "shop-orders-YYYY-MM-DD.json"
            ),
        }

    def test_backup_links(self):
        presenter = LinkPresenter(BASE)
        name = "shop-orders-2024-01-05.json"
        assert presenter.backup_links(ORDERS, name) == {
            "file": name,
            "download": f"{BASE}/shop-orders/{name}",
            "restore": f"{BASE}/upload-to-local-mongodb/db/shop/col/orders/file/{name}",
        }

    def test_item_url(self):
        presenter = LinkPresenter(BASE)
        assert presenter.item_url(ORDERS, "abc") == f"{BASE}/read-item/db/shop/col/orders/id/abc"

    def test_items_url(self):
        presenter = LinkPresenter(BASE)
        assert presenter.collection_items_url(ORDERS, ProjectionMode.FULL).endswith(
            "/itemsmode/full"
        )

    def test_segments_are_escaped(self):
        """Names with spaces or reserved characters stay one path segment."""
        presenter = LinkPresenter(BASE)
        ns = Namespace("my db", "a?b")
        assert presenter.item_url(ns, "x") == f"{BASE}/read-item/db/my%20db/col/a%3Fb/id/x"

    def test_collection_entry(self):
        presenter = LinkPresenter(BASE)
        entry = CollectionEntry(ORDERS, True, ["shop-orders-2024-01-05.json"])

        presented = presenter.collection_entry(entry)

        assert presented["collection"] == "orders"
        assert [b["file"] for b in presented["backups"]] == ["shop-orders-2024-01-05.json"]
        assert presented["create-backup"] == f"{BASE}/create-backup/db/shop/col/orders"
