"""
Document store abstraction for docsnap.

This module provides a pluggable backend interface supporting:
- MongoDB through pymongo's async client (production)
- In-memory (for testing and local development)

Invariants:
    - Driver errors never escape a backend untranslated
    - The core only talks to stores through the DocumentStore protocol

How to change safely:
    - New backends must implement the DocumentStore protocol
    - Register new URI schemes in create_document_store()
"""

from .base import ASCENDING, DESCENDING, Document, DocumentStore, create_document_store
from .memory import InMemoryDocumentStore
from .mongo import MongoDocumentStore

__all__ = [
    # Protocol and types
    "DocumentStore",
    "Document",
    "ASCENDING",
    "DESCENDING",
    # Factory
    "create_document_store",
    # Implementations
    "MongoDocumentStore",
    "InMemoryDocumentStore",
]
