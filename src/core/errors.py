"""Satchel exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each storage concern raises a specific error type for debuggability.
"""

from __future__ import annotations


class SatchelError(Exception):
    """Base exception for all Satchel failures."""


class SatchelConfigError(SatchelError):
    """Raised for invalid runtime configuration."""


class SatchelStorageError(SatchelError):
    """Raised for session storage failures."""


class ImmutableStorageError(SatchelStorageError):
    """Raised when a mutation targets storage marked immutable."""


class SerializationError(SatchelStorageError):
    """Raised when session data cannot be encoded."""


class DeserializationError(SatchelStorageError):
    """Raised when an encoded payload cannot be decoded into a mapping."""
