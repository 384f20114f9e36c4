"""
docsnap - browse a MongoDB deployment and snapshot collections to JSON.

This package implements a small backup service built on:
- A document store protocol with MongoDB (pymongo) and in-memory backends
- Dated, per-collection JSON snapshot files on the local filesystem
- A restore pipeline that replays snapshots into another store
- A browsable HTTP API (FastAPI) and two CLIs

Architecture:
    ┌─────────────┐     ┌─────────────┐     ┌─────────────────┐
    │ HTTP / CLI  │────▶│  Backup     │────▶│ Source store    │
    │             │     │  Service    │     │ (MongoDB)       │
    └─────────────┘     └──────┬──────┘     └─────────────────┘
                               │
              ┌────────────────┼────────────────┐
              ▼                ▼                ▼
        ┌──────────┐    ┌────────────┐    ┌───────────┐
        │ Catalog  │    │ Snapshot   │    │ Restore   │──▶ Target store
        │ / Reader │    │ Writer     │    │ Pipeline  │
        └──────────┘    └─────┬──────┘    └─────┬─────┘
                              ▼                 │
                        ┌────────────┐          │
                        │ backups/   │◀─────────┘
                        │ db-col/*.json
                        └────────────┘

Invariants:
    - Snapshot files are whole: written to a temp file and renamed into place
    - One snapshot per namespace per calendar day (last write wins)
    - Serialized identifiers are always rehydrated before insert

How to change safely:
    - Keep snapshot file names <db>-<col>-YYYY-MM-DD.json, restore links rely on it
    - New store backends implement DocumentStore and register in the factory
"""

from ._version import __version__

__all__ = ["__version__"]
