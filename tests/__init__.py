"""
docsnap test suite.

This package contains:
- unit/: Unit tests (in-memory stores, temporary directories)
- integration/: HTTP and CLI flows over in-memory stores
"""
