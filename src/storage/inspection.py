"""Read-only summaries of session storage state."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from core.config import SatchelConfig
from core.constants import READONLY_METADATA_KEY, REQUEST_ACCESS_TIME_METADATA_KEY
from core.types import SessionKey, StorageSummary
from storage.session_storage import ArrayStorage, SessionStorage


def summarize_storage(storage: SessionStorage) -> StorageSummary:
    """Build a summary of keys, locks, and flags without mutating storage.

    Args:
        storage: Storage to inspect.

    Returns:
        Immutable summary.
    """
    user_keys = tuple(storage.to_dict())
    metadata = storage.get_metadata(default=None) or {}
    return StorageSummary(
        user_keys=user_keys,
        metadata_keys=tuple(metadata),
        immutable=storage.is_immutable(),
        global_lock=bool(metadata.get(READONLY_METADATA_KEY, False)),
        explicit_locks=tuple(sorted(storage.explicit_locks(), key=str)),
        locked_keys=tuple(key for key in user_keys if storage.is_locked(key)),
        request_access_time=storage.get_request_access_time(),
    )


def summarize_payload(
    payload: Mapping[SessionKey, Any],
    config: SatchelConfig,
) -> StorageSummary:
    """Summarize a decoded session dictionary as it was persisted.

    Loading the payload into storage stamps a fresh access time, so the
    persisted one is read from the payload itself.

    Args:
        payload: Decoded session dictionary, metadata included.
        config: Configuration naming the metadata key.

    Returns:
        Immutable summary.
    """
    storage = ArrayStorage(payload, config=config)
    metadata = payload.get(config.metadata_key)
    stored_time = None
    if isinstance(metadata, Mapping):
        stored_time = metadata.get(REQUEST_ACCESS_TIME_METADATA_KEY)
    return replace(summarize_storage(storage), request_access_time=stored_time)


def summary_to_payload(summary: StorageSummary) -> dict[str, object]:
    """Render a summary as a JSON-safe dictionary."""
    return {
        "user_keys": [str(key) for key in summary.user_keys],
        "metadata_keys": [str(key) for key in summary.metadata_keys],
        "immutable": summary.immutable,
        "global_lock": summary.global_lock,
        "explicit_locks": [str(key) for key in summary.explicit_locks],
        "locked_keys": [str(key) for key in summary.locked_keys],
        "request_access_time": summary.request_access_time,
    }
