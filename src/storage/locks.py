"""Global and per-key read-only locks.

The lock set is a sparse list of locked keys layered under a coarse
global switch. With the global flag set and no lock set, every key is
locked; with both present, only keys in the set are locked.
"""

from __future__ import annotations

from typing import Any

from core.constants import LOCKS_METADATA_KEY, READONLY_METADATA_KEY
from core.logging_config import get_logger
from core.types import SessionKey
from storage.container import SessionContainer
from storage.immutability import ImmutabilityGuard
from storage.metadata import MetadataLedger

_LOGGER = get_logger(__name__)


class LockManager:
    """Lock bookkeeping stored in the metadata ledger."""

    def __init__(
        self,
        container: SessionContainer,
        ledger: MetadataLedger,
        guard: ImmutabilityGuard,
    ) -> None:
        self._container = container
        self._ledger = ledger
        self._guard = guard

    def lock(self, key: SessionKey | None = None) -> None:
        """Lock the whole storage, or one existing user key.

        Locking a key that is not present in the user region is a no-op.

        Raises:
            ImmutableStorageError: If the storage is marked immutable.
        """
        if key is None:
            self._ledger.set_metadata(READONLY_METADATA_KEY, True)
            _LOGGER.debug("storage_locked", scope="global")
            return
        if not self._is_user_key(key):
            return
        self._ledger.set_metadata(LOCKS_METADATA_KEY, {key: True})
        _LOGGER.debug("storage_locked", scope="key", key=key)

    def is_locked(self, key: SessionKey | None = None) -> bool:
        """Return whether the storage, or a given key, is read-only.

        Immutable storage reads as locked for every query.
        """
        if self._guard.is_immutable():
            return True
        read_only = bool(self._ledger.get_metadata(READONLY_METADATA_KEY))
        if key is None:
            return read_only
        locks = self._lock_set()
        if read_only and not locks:
            return True
        return key in locks

    def unlock(self, key: SessionKey | None = None) -> None:
        """Clear every lock, or release a single key.

        Releasing one key under a global lock without a lock set first
        turns the implicit lock into an explicit set of all user keys.

        Raises:
            ImmutableStorageError: If the storage is marked immutable.
        """
        if key is None:
            self._ledger.set_metadata(READONLY_METADATA_KEY, False)
            self._ledger.set_metadata(LOCKS_METADATA_KEY, None)
            _LOGGER.debug("storage_unlocked", scope="global")
            return
        locks = self._lock_set()
        if not locks:
            if not self._ledger.get_metadata(READONLY_METADATA_KEY):
                return
            locks = {user_key: True for user_key in self._user_keys()}
            _LOGGER.debug("implicit_locks_materialized", key_count=len(locks))
        if key not in locks:
            return
        remaining = {locked_key: flag for locked_key, flag in locks.items() if locked_key != key}
        self._ledger.set_metadata(LOCKS_METADATA_KEY, remaining, overwrite=True)
        _LOGGER.debug("storage_unlocked", scope="key", key=key)

    def explicit_locks(self) -> tuple[SessionKey, ...]:
        """Return keys listed in the lock set, in insertion order."""
        return tuple(self._lock_set())

    def _lock_set(self) -> dict[SessionKey, Any]:
        locks = self._ledger.get_metadata(LOCKS_METADATA_KEY, default=None)
        return locks if isinstance(locks, dict) else {}

    def _user_keys(self) -> list[SessionKey]:
        metadata_key = self._ledger.metadata_key
        return [key for key in self._container.data if key != metadata_key]

    def _is_user_key(self, key: SessionKey) -> bool:
        return key != self._ledger.metadata_key and key in self._container.data
