"""Ambient session dictionary holders.

This module supplies the live dictionary a storage instance wraps.
A container is injected into every storage component so that several
instances sharing one container observe one state.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Mapping

from core.constants import AMBIENT_CONTEXT_NAME
from core.errors import SatchelStorageError
from core.types import SessionKey


class SessionContainer:
    """Holder for the ambient dictionary of one logical session."""

    def __init__(self, data: object = None) -> None:
        self._data = data

    def is_bound(self) -> bool:
        """Return whether a value has been supplied."""
        return self._load() is not None

    @property
    def data(self) -> dict[SessionKey, Any]:
        """Return the live dictionary, binding an empty one when absent."""
        current = self._load()
        if current is None:
            current = {}
            self._store(current)
        return current

    def raw(self) -> object:
        """Return whatever the supplier bound, without coercion."""
        return self._load()

    def bind(self, data: object) -> None:
        """Install a value as the ambient session state.

        Suppliers may bind any value; storage initialization coerces it.

        Args:
            data: Value to wrap; dictionaries are used by reference.
        """
        self._store(data)

    def unbind(self) -> None:
        """Drop the bound dictionary, as at the end of a request."""
        self._store(None)

    def replace(self, mapping: Mapping[SessionKey, Any]) -> None:
        """Swap the dictionary contents in place.

        References to the bound dictionary held by the supplier stay valid.

        Args:
            mapping: New contents; may be the bound dictionary itself.
        """
        incoming = copy_structure(dict(mapping))
        current = self.data
        current.clear()
        current.update(incoming)

    def region(self, name: SessionKey) -> dict[SessionKey, Any] | None:
        """Return the nested dictionary stored under a reserved key, if any."""
        region = self.data.get(name)
        return region if isinstance(region, dict) else None

    def ensure_region(self, name: SessionKey) -> dict[SessionKey, Any]:
        """Return a nested dictionary, creating or resetting a malformed one.

        Args:
            name: Top-level key of the region.

        Returns:
            The region dictionary.
        """
        region = self.region(name)
        if region is None:
            region = {}
            self.data[name] = region
        return region

    def _load(self) -> Any:
        return self._data

    def _store(self, data: Any) -> None:
        self._data = data


class ContextSessionContainer(SessionContainer):
    """Container whose dictionary lives in a context variable.

    Each thread or asyncio task context sees its own ambient dictionary,
    which mirrors one session dictionary per request.
    """

    def __init__(self, name: str = AMBIENT_CONTEXT_NAME) -> None:
        super().__init__()
        self._var: ContextVar[Any] = ContextVar(name, default=None)

    def _load(self) -> Any:
        return self._var.get()

    def _store(self, data: Any) -> None:
        self._var.set(data)


def coerce_ambient(value: object) -> dict[SessionKey, Any]:
    """Coerce ambient state supplied by a request lifecycle into a dict.

    Args:
        value: Bound ambient value.

    Returns:
        The value itself when it is a dict, otherwise a converted copy.
        Mappings are copied and objects contribute their attributes;
        scalars, strings, and sequences have no key/value view and are
        rejected instead of wrapped.

    Raises:
        SatchelStorageError: If the value cannot be viewed as a mapping.
    """
    if isinstance(value, dict):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    if hasattr(value, "__dict__"):
        return dict(vars(value))
    raise SatchelStorageError(
        f"Cannot use ambient session state of type {type(value).__name__}. "
        "Bind a dict or mapping before initializing storage."
    )


_AMBIENT_CONTAINER = ContextSessionContainer()


def ambient_container() -> ContextSessionContainer:
    """Return the process-wide request-scoped container."""
    return _AMBIENT_CONTAINER


def copy_structure(value: Any) -> Any:
    """Copy nested dicts and lists; other values are shared by reference.

    Snapshots taken this way are unaffected by later structural writes
    such as metadata merges, without requiring values to be copyable.
    """
    if isinstance(value, dict):
        return {key: copy_structure(item) for key, item in value.items()}
    if isinstance(value, list):
        return [copy_structure(item) for item in value]
    return value
