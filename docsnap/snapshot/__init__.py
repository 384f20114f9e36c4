"""
Snapshot module for docsnap.

This module handles dated JSON snapshots of collections for:
- Point-in-time copies of a collection
- Replaying a collection into another store (see tools.restore)

Invariants:
    - Only complete reads are written
    - Snapshot files are replaced atomically
"""

from .snapshot_store import SnapshotStore, run_file_io
from .snapshotter import SnapshotInfo, SnapshotWriter

__all__ = ["SnapshotStore", "SnapshotWriter", "SnapshotInfo", "run_file_io"]
