"""Unit tests for global and per-key locks."""

from __future__ import annotations

import pytest

from core.errors import ImmutableStorageError
from storage.container import SessionContainer
from storage.immutability import ImmutabilityGuard
from storage.locks import LockManager
from storage.metadata import MetadataLedger


def _locks(data: dict | None = None) -> tuple[LockManager, SessionContainer, ImmutabilityGuard]:
    container = SessionContainer(data if data is not None else {})
    guard = ImmutabilityGuard(container, "__META")
    ledger = MetadataLedger(container, guard, "__META")
    return LockManager(container, ledger, guard), container, guard


def test_nothing_is_locked_by_default() -> None:
    """Fresh storage should report no locks."""
    locks, _, _ = _locks({"a": 1})

    assert not locks.is_locked() and not locks.is_locked("a")


def test_global_lock_locks_every_key() -> None:
    """Global lock without a lock set should lock all keys."""
    locks, _, _ = _locks({"a": 1, "b": 2})

    locks.lock()

    assert locks.is_locked() and locks.is_locked("a") and locks.is_locked("b")


def test_global_lock_covers_keys_added_later() -> None:
    """Keys written after a global lock should also read as locked."""
    locks, container, _ = _locks({"a": 1})
    locks.lock()

    container.data["later"] = 3

    assert locks.is_locked("later") and locks.is_locked("missing")


def test_lock_key_locks_only_that_key() -> None:
    """Per-key lock should not affect other keys or the global flag."""
    locks, _, _ = _locks({"a": 1, "b": 2})

    locks.lock("a")

    assert locks.is_locked("a") and not locks.is_locked("b") and not locks.is_locked()


def test_lock_missing_key_is_noop() -> None:
    """Locking an absent key should not create a lock set."""
    locks, container, _ = _locks({"a": 1})

    locks.lock("ghost")

    assert not locks.is_locked("ghost") and "__META" not in container.data


def test_lock_keys_accumulate_in_lock_set() -> None:
    """Successive key locks should merge into one lock set."""
    locks, _, _ = _locks({"a": 1, "b": 2, "c": 3})

    locks.lock("a")
    locks.lock("b")

    assert locks.explicit_locks() == ("a", "b")


def test_global_lock_with_lock_set_restricts_to_listed_keys() -> None:
    """With both present, only listed keys should be locked."""
    locks, _, _ = _locks({"a": 1, "b": 2})
    locks.lock("a")

    locks.lock()

    assert locks.is_locked("a") and not locks.is_locked("b") and locks.is_locked()


def test_unlock_key_materializes_implicit_global_lock() -> None:
    """Unlocking one key under a bare global lock should keep the others locked."""
    locks, _, _ = _locks({"a": 1, "b": 2, "c": 3})
    locks.lock()

    locks.unlock("a")

    assert (locks.is_locked("a"), locks.is_locked("b"), locks.is_locked("c")) == (
        False,
        True,
        True,
    )


def test_unlock_key_skips_metadata_region_when_materializing() -> None:
    """Materialized lock set should only contain user keys."""
    locks, _, _ = _locks({"a": 1, "b": 2, "__META": {"note": 1}})
    locks.lock()

    locks.unlock("a")

    assert locks.explicit_locks() == ("b",)


def test_unlock_key_without_any_lock_is_noop() -> None:
    """Unlocking with nothing locked should not write metadata."""
    locks, container, _ = _locks({"a": 1})

    locks.unlock("a")

    assert container.data == {"a": 1}


def test_unlock_key_removes_from_explicit_set() -> None:
    """Unlocking a listed key should drop it from the set."""
    locks, _, _ = _locks({"a": 1, "b": 2})
    locks.lock("a")
    locks.lock("b")

    locks.unlock("a")

    assert locks.explicit_locks() == ("b",) and not locks.is_locked("a")


def test_unlock_last_key_under_global_lock_relocks_everything() -> None:
    """An emptied lock set counts as absent while the global flag is set."""
    locks, _, _ = _locks({"a": 1})
    locks.lock()

    locks.unlock("a")

    assert locks.explicit_locks() == () and locks.is_locked("a")


def test_unlock_all_clears_flag_and_lock_set() -> None:
    """Global unlock should remove every lock."""
    locks, _, _ = _locks({"a": 1, "b": 2})
    locks.lock("a")
    locks.lock()

    locks.unlock()

    assert not locks.is_locked() and not locks.is_locked("a") and locks.explicit_locks() == ()


def test_immutable_storage_reads_as_locked() -> None:
    """Immutability should lock every key and the storage."""
    locks, _, guard = _locks({"a": 1})

    guard.mark_immutable()

    assert locks.is_locked() and locks.is_locked("a") and locks.is_locked("missing")


def test_lock_raises_when_immutable() -> None:
    """Lock writes should be rejected on immutable storage."""
    locks, _, guard = _locks({"a": 1})
    guard.mark_immutable()

    with pytest.raises(ImmutableStorageError):
        locks.lock("a")
