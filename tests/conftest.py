"""
Shared fixtures for docsnap tests.

Every fixture works on in-memory stores and a throwaway backups directory;
no MongoDB deployment is needed.
"""

import tempfile
from datetime import date
from pathlib import Path

import pytest

from docsnap.config import Settings
from docsnap.service import BackupService
from docsnap.snapshot import SnapshotStore
from docsnap.store import InMemoryDocumentStore
from docsnap.types import Namespace

SNAPSHOT_DAY = date(2024, 1, 5)


@pytest.fixture
def backups_dir():
    """Create a temporary snapshot root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings(backups_dir):
    """Settings pointing both stores at memory:// URIs."""
    return Settings(
        mongodb_uri="memory://",
        restore_target_uri="memory://",
        backups_dir=backups_dir,
        public_base_url="http://testserver",
        log_format="text",
    )


@pytest.fixture
def source():
    """Source store (the deployment being backed up)."""
    return InMemoryDocumentStore()


@pytest.fixture
def target():
    """Restore target store."""
    return InMemoryDocumentStore()


@pytest.fixture
def snapshot_store(backups_dir):
    return SnapshotStore(backups_dir)


@pytest.fixture
def orders():
    return Namespace("shop", "orders")


@pytest.fixture
def service(settings, source, target, snapshot_store):
    """Backup service over in-memory stores with a fixed clock."""
    return BackupService(
        settings,
        source=source,
        target=target,
        snapshot_store=snapshot_store,
        today=lambda: SNAPSHOT_DAY,
    )
