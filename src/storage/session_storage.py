"""Session storage façade.

This module exposes dictionary access, metadata, locking, immutability,
snapshot/restore, and serialization over one ambient session dictionary.
The storage object holds no private copy of the data: its state lives in
the container, so instances sharing a container observe the same state.
"""

from __future__ import annotations

import time
from typing import Any, Iterator, Mapping

from core.config import SatchelConfig
from core.constants import REQUEST_ACCESS_TIME_METADATA_KEY
from core.logging_config import get_logger
from core.types import SessionKey
from storage.codec import SessionCodec, resolve_codec
from storage.container import (
    SessionContainer,
    ambient_container,
    coerce_ambient,
    copy_structure,
)
from storage.immutability import ImmutabilityGuard
from storage.locks import LockManager
from storage.metadata import MetadataLedger

_LOGGER = get_logger(__name__)


class SessionStorage:
    """Storage over the request-scoped ambient session dictionary.

    Plain dictionary writes are not gated by locks or immutability;
    callers consult ``is_locked`` and ``is_immutable`` before writing.
    Metadata writes, locking, and ``clear`` fail on immutable storage.
    """

    def __init__(
        self,
        source: Mapping[SessionKey, Any] | None = None,
        *,
        container: SessionContainer | None = None,
        config: SatchelConfig | None = None,
    ) -> None:
        """Create storage and seed it.

        Args:
            source: Optional initial contents; the ambient dictionary is
                reused when omitted.
            container: Ambient dictionary holder; defaults per subclass.
            config: Optional runtime configuration.
        """
        self._config = config or SatchelConfig.from_env()
        self._container = container if container is not None else self._default_container()
        self._guard = ImmutabilityGuard(self._container, self._config.metadata_key)
        self._ledger = MetadataLedger(self._container, self._guard, self._config.metadata_key)
        self._locks = LockManager(self._container, self._ledger, self._guard)
        self._codec: SessionCodec = resolve_codec(self._config.serializer)
        self.init(source)

    def _default_container(self) -> SessionContainer:
        return ambient_container()

    @property
    def container(self) -> SessionContainer:
        """Return the container holding the live dictionary."""
        return self._container

    @property
    def metadata_key(self) -> str:
        """Return the reserved top-level metadata key."""
        return self._config.metadata_key

    def init(self, source: Mapping[SessionKey, Any] | None = None) -> None:
        """Seed the ambient dictionary and stamp the request access time.

        Args:
            source: Explicit contents, copied into a new dictionary. When
                None, an already bound ambient value is reused (coerced to a
                dict if needed), otherwise storage starts empty. Only mappings
                and attribute-bearing objects are coerced; other values raise.

        Raises:
            SatchelStorageError: If bound ambient state is not mapping-like.
        """
        if source is not None:
            self._container.bind(copy_structure(dict(source)))
        elif self._container.is_bound():
            self._container.bind(coerce_ambient(self._container.raw()))
        else:
            self._container.bind({})
        self._set_request_access_time(time.time())
        _LOGGER.debug(
            "storage_initialized",
            seeded=source is not None,
            entry_count=len(self._container.data),
        )

    # Dictionary access

    def exists(self, key: SessionKey) -> bool:
        """Return whether the key is present in the dictionary."""
        return key in self._container.data

    def get(self, key: SessionKey, default: Any = None) -> Any:
        """Return a stored value, or ``default`` when absent."""
        return self._container.data.get(key, default)

    def set(self, key: SessionKey, value: Any) -> None:
        """Store a value. Locks are advisory and not checked here."""
        self._container.data[key] = value

    def delete(self, key: SessionKey) -> None:
        """Remove a key if present."""
        self._container.data.pop(key, None)

    def count(self) -> int:
        """Return the number of entries, counting the metadata region as one."""
        return len(self._container.data)

    def items(self) -> list[tuple[SessionKey, Any]]:
        """Return ``(key, value)`` pairs as they stand at call time."""
        return list(self._container.data.items())

    def __contains__(self, key: object) -> bool:
        return key in self._container.data

    def __getitem__(self, key: SessionKey) -> Any:
        return self._container.data[key]

    def __setitem__(self, key: SessionKey, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: SessionKey) -> None:
        del self._container.data[key]

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[tuple[SessionKey, Any]]:
        return iter(self.items())

    # Snapshot and restore

    def to_dict(self, include_metadata: bool = False) -> dict[SessionKey, Any]:
        """Return a copy of the current state.

        Args:
            include_metadata: Keep the metadata region in the copy.

        Returns:
            Snapshot dictionary.
        """
        values = copy_structure(self._container.data)
        if not include_metadata:
            values.pop(self._config.metadata_key, None)
        return values

    def from_dict(self, new_data: Mapping[SessionKey, Any]) -> "SessionStorage":
        """Replace the whole dictionary, keeping the request access time.

        All other metadata comes from ``new_data``. This is the only way to
        leave the immutable state.

        Args:
            new_data: Replacement contents, metadata region included.

        Returns:
            This storage.
        """
        access_time = self.get_request_access_time()
        self._container.replace(new_data)
        self._set_request_access_time(access_time)
        _LOGGER.debug("storage_restored", entry_count=len(self._container.data))
        return self

    def clear(self, key: SessionKey | None = None) -> "SessionStorage":
        """Empty the storage, or drop one key with its metadata and lock.

        A key is also looked up as a metadata key, so a metadata entry with
        the same name is removed too.

        Raises:
            ImmutableStorageError: If the storage is marked immutable.
        """
        self._guard.ensure_mutable("clear storage", key)
        if key is None:
            self.from_dict({})
            _LOGGER.info("storage_cleared")
            return self
        self._container.data.pop(key, None)
        self._ledger.set_metadata(key, None)
        self._locks.unlock(key)
        _LOGGER.debug("storage_key_cleared", key=key)
        return self

    # Immutability

    def mark_immutable(self) -> "SessionStorage":
        """Block every guarded mutation until the next full restore."""
        self._guard.mark_immutable()
        return self

    def is_immutable(self) -> bool:
        """Return whether the storage is marked immutable."""
        return self._guard.is_immutable()

    # Locking

    def lock(self, key: SessionKey | None = None) -> "SessionStorage":
        """Lock the storage globally, or one existing key."""
        self._locks.lock(key)
        return self

    def unlock(self, key: SessionKey | None = None) -> "SessionStorage":
        """Release all locks, or one key."""
        self._locks.unlock(key)
        return self

    def is_locked(self, key: SessionKey | None = None) -> bool:
        """Return whether the storage or a key is read-only."""
        return self._locks.is_locked(key)

    def explicit_locks(self) -> tuple[SessionKey, ...]:
        """Return keys listed in the lock set."""
        return self._locks.explicit_locks()

    # Metadata

    def set_metadata(
        self,
        key: SessionKey,
        value: Any,
        overwrite: bool = False,
    ) -> "SessionStorage":
        """Set, merge, or remove a metadata entry.

        Mapping values merge recursively into an existing mapping unless
        ``overwrite`` is true. ``None`` removes the entry.

        Raises:
            ImmutableStorageError: If the storage is marked immutable.
        """
        self._ledger.set_metadata(key, value, overwrite)
        return self

    def get_metadata(self, key: SessionKey | None = None, default: Any = False) -> Any:
        """Return the metadata region, or one entry; ``default`` when absent."""
        return self._ledger.get_metadata(key, default)

    def has_metadata(self, key: SessionKey) -> bool:
        """Return whether a metadata entry exists."""
        return self._ledger.has_metadata(key)

    def get_request_access_time(self) -> float | None:
        """Return the time stamped by the last init, or None."""
        return self._ledger.get_metadata(REQUEST_ACCESS_TIME_METADATA_KEY, default=None)

    def _set_request_access_time(self, access_time: float | None) -> None:
        self._ledger.write(REQUEST_ACCESS_TIME_METADATA_KEY, access_time)

    # Serialization

    def serialize(self) -> bytes:
        """Encode the full dictionary, metadata included.

        Raises:
            SerializationError: If a value cannot be encoded.
        """
        return self._codec.encode(self._container.data)

    def deserialize(self, payload: bytes) -> dict[SessionKey, Any]:
        """Decode a payload produced by ``serialize``; storage is unchanged.

        Raises:
            DeserializationError: If the payload does not decode to a mapping.
        """
        return self._codec.decode(payload)


class ArrayStorage(SessionStorage):
    """Session storage over a private dictionary instead of the ambient one."""

    def _default_container(self) -> SessionContainer:
        return SessionContainer()
