"""
CLI tools for docsnap.

This module provides command-line tools for:
- backup: List namespaces and create snapshots without the HTTP server
- restore: Replay a snapshot file into a target store

Invariants:
    - Tools work without a running server
    - Failures print the error message and exit non-zero
"""

from .restore import RestorePipeline, RestoreResult, RestoreStage, rehydrate_documents

__all__ = ["RestorePipeline", "RestoreResult", "RestoreStage", "rehydrate_documents"]
