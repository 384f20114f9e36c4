"""
HTTP API for docsnap.

Invariants:
    - Routes call BackupService and nothing below it
    - Link construction lives in LinkPresenter, never in route bodies

How to change safely:
    - Keep existing route paths; add new ones instead of renaming
"""

from .app import create_app
from .links import LinkPresenter

__all__ = [
    "LinkPresenter",
    "create_app",
]
