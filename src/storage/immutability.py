"""Immutability flag for session storage.

Once marked, every guarded mutation fails until the dictionary is
replaced wholesale by a restore that does not carry the flag.
"""

from __future__ import annotations

from core.constants import IMMUTABLE_METADATA_KEY
from core.errors import ImmutableStorageError
from core.logging_config import get_logger
from core.types import SessionKey
from storage.container import SessionContainer

_LOGGER = get_logger(__name__)


class ImmutabilityGuard:
    """Reads and sets the immutable flag in the metadata region."""

    def __init__(self, container: SessionContainer, metadata_key: str) -> None:
        self._container = container
        self._metadata_key = metadata_key

    def is_immutable(self) -> bool:
        """Return whether the storage is marked immutable."""
        region = self._container.region(self._metadata_key)
        if region is None:
            return False
        return bool(region.get(IMMUTABLE_METADATA_KEY, False))

    def mark_immutable(self) -> None:
        """Set the immutable flag; repeated calls are no-ops."""
        region = self._container.ensure_region(self._metadata_key)
        if region.get(IMMUTABLE_METADATA_KEY) is True:
            return
        region[IMMUTABLE_METADATA_KEY] = True
        _LOGGER.info("storage_marked_immutable", metadata_key=self._metadata_key)

    def ensure_mutable(self, action: str, key: SessionKey | None = None) -> None:
        """Fail fast when a mutation targets immutable storage.

        Args:
            action: Name of the rejected operation, used in the error.
            key: Optional key the operation targets.

        Raises:
            ImmutableStorageError: If the immutable flag is set.
        """
        if not self.is_immutable():
            return
        _LOGGER.warning("immutable_write_rejected", action=action, key=key)
        target = f" key '{key}'" if key is not None else ""
        raise ImmutableStorageError(
            f"Cannot {action}{target}: storage is marked immutable. "
            "Restore the session from a snapshot without the immutable flag first."
        )
