"""Session storage layer.

This module wraps a live session dictionary with metadata, locking,
immutability, snapshot, and serialization operations.
"""
