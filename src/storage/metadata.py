"""Metadata ledger for session storage.

This module keeps bookkeeping entries in a reserved sub-mapping of the
session dictionary, separate from user data. Mapping values merge
recursively into existing mappings unless an overwrite is requested.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.types import SessionKey
from storage.container import SessionContainer, copy_structure
from storage.immutability import ImmutabilityGuard


class MetadataLedger:
    """Reserved metadata namespace inside the ambient dictionary."""

    def __init__(
        self,
        container: SessionContainer,
        guard: ImmutabilityGuard,
        metadata_key: str,
    ) -> None:
        """Create a ledger over a container.

        Args:
            container: Ambient dictionary holder.
            guard: Immutability guard consulted before every write.
            metadata_key: Top-level key holding the metadata region.
        """
        self._container = container
        self._guard = guard
        self._metadata_key = metadata_key

    @property
    def metadata_key(self) -> str:
        """Return the reserved top-level key."""
        return self._metadata_key

    def set_metadata(self, key: SessionKey, value: Any, overwrite: bool = False) -> None:
        """Set, merge, or remove a metadata entry.

        Args:
            key: Metadata key.
            value: New value. ``None`` removes an existing entry.
            overwrite: Replace an existing mapping instead of merging into it.

        Raises:
            ImmutableStorageError: If the storage is marked immutable.
        """
        self._guard.ensure_mutable("set metadata", key)
        self.write(key, value, overwrite)

    def write(self, key: SessionKey, value: Any, overwrite: bool = False) -> None:
        """Apply a metadata write without consulting the immutability guard.

        Used for request bookkeeping that must succeed on immutable snapshots.
        """
        region = self._container.ensure_region(self._metadata_key)
        existing = region.get(key)
        if isinstance(value, Mapping):
            value = copy_structure(dict(value))
        if isinstance(value, Mapping) and isinstance(existing, Mapping) and not overwrite:
            region[key] = replace_recursive(existing, value)
        elif value is None:
            region.pop(key, None)
        else:
            region[key] = copy_structure(value)

    def get_metadata(self, key: SessionKey | None = None, default: Any = False) -> Any:
        """Return a copy of the whole metadata region or of one entry.

        Nested dicts and lists are copied, so writing to the result never
        changes stored metadata.

        Args:
            key: Metadata key; None returns the whole region.
            default: Returned when the region or key is absent.

        Returns:
            Stored value or ``default``.
        """
        region = self._container.region(self._metadata_key)
        if region is None:
            return default
        if key is None:
            return copy_structure(region)
        if key not in region:
            return default
        return copy_structure(region[key])

    def has_metadata(self, key: SessionKey) -> bool:
        """Return whether a metadata entry exists, even if it stores False."""
        region = self._container.region(self._metadata_key)
        return region is not None and key in region


def replace_recursive(
    base: Mapping[SessionKey, Any],
    replacements: Mapping[SessionKey, Any],
) -> dict[SessionKey, Any]:
    """Merge mappings; replacement leaves win, nested mappings merge.

    Args:
        base: Existing mapping.
        replacements: Incoming mapping.

    Returns:
        A new merged dictionary. Neither input is modified.
    """
    merged = dict(base)
    for key, value in replacements.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = replace_recursive(current, value)
        else:
            merged[key] = value
    return merged
