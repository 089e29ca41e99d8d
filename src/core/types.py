"""Shared typed models.

This module defines key aliases and immutable summary models used by
the storage layer, the inspection helpers, and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

SessionKey = Union[str, int]


@dataclass(frozen=True)
class StorageSummary:
    """Read-only view of a session dictionary's bookkeeping state.

    Attributes:
        user_keys: Keys of the user region in insertion order.
        metadata_keys: Keys of the metadata region in insertion order.
        immutable: Whether the storage is marked immutable.
        global_lock: Whether the global read-only flag is set.
        explicit_locks: Keys listed in the lock set.
        locked_keys: User keys that currently read as locked.
        request_access_time: Last stamped request access time, if any.
    """

    user_keys: tuple[SessionKey, ...]
    metadata_keys: tuple[SessionKey, ...]
    immutable: bool
    global_lock: bool
    explicit_locks: tuple[SessionKey, ...]
    locked_keys: tuple[SessionKey, ...]
    request_access_time: float | None
