"""Public SDK surface for Satchel.

This module provides a stable import path for library users.
It re-exports the storage classes, containers, and error types.
"""

from __future__ import annotations

from core.config import SatchelConfig
from core.errors import (
    DeserializationError,
    ImmutableStorageError,
    SatchelConfigError,
    SatchelError,
    SatchelStorageError,
    SerializationError,
)
from core.types import StorageSummary
from storage.codec import JsonCodec, PickleCodec, resolve_codec
from storage.container import ContextSessionContainer, SessionContainer, ambient_container
from storage.inspection import summarize_storage
from storage.session_storage import ArrayStorage, SessionStorage

__all__ = [
    "ArrayStorage",
    "ContextSessionContainer",
    "DeserializationError",
    "ImmutableStorageError",
    "JsonCodec",
    "PickleCodec",
    "SatchelConfig",
    "SatchelConfigError",
    "SatchelError",
    "SatchelStorageError",
    "SerializationError",
    "SessionContainer",
    "SessionStorage",
    "StorageSummary",
    "ambient_container",
    "resolve_codec",
    "summarize_storage",
]
