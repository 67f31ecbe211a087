# tests/property/__init__.py
"""Property-based tests for chatmock.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of: every reply must survive
chunking intact, and every request body must decode the same with or
without gzip.
"""
