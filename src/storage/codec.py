"""Durable encodings for the full session dictionary.

Persistence backends treat encoded payloads as opaque bytes. Pickle is
lossless for arbitrary values and must only read trusted payloads; JSON
is portable but limited to string keys and JSON-native values.
"""

from __future__ import annotations

import json
import pickle
from typing import Any, Mapping, Protocol

from core.constants import SUPPORTED_SERIALIZERS
from core.errors import DeserializationError, SatchelConfigError, SerializationError
from core.logging_config import get_logger
from core.types import SessionKey

_LOGGER = get_logger(__name__)


class SessionCodec(Protocol):
    """Encode and decode session dictionaries."""

    name: str

    def encode(self, data: Mapping[SessionKey, Any]) -> bytes:
        """Encode a session dictionary."""
        ...

    def decode(self, payload: bytes) -> dict[SessionKey, Any]:
        """Decode a payload into a session dictionary."""
        ...


class PickleCodec:
    """Lossless codec backed by the pickle protocol."""

    name = "pickle"

    def encode(self, data: Mapping[SessionKey, Any]) -> bytes:
        try:
            return pickle.dumps(dict(data), protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as error:
            raise SerializationError(
                f"Failed to pickle session data: {error}. "
                "Store only picklable values in the session."
            ) from error

    def decode(self, payload: bytes) -> dict[SessionKey, Any]:
        try:
            decoded = pickle.loads(payload)
        except Exception as error:
            _LOGGER.warning("session_deserialization_failed", codec=self.name, error=str(error))
            raise DeserializationError(
                f"Failed to unpickle session payload: {error}. "
                "The payload is truncated or was written by another serializer."
            ) from error
        return _expect_mapping(decoded, self.name)


class JsonCodec:
    """UTF-8 JSON codec for sessions holding JSON-native values."""

    name = "json"

    def encode(self, data: Mapping[SessionKey, Any]) -> bytes:
        try:
            return json.dumps(dict(data), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as error:
            raise SerializationError(
                f"Failed to encode session data as JSON: {error}. "
                "Use the pickle serializer for non-JSON values."
            ) from error

    def decode(self, payload: bytes) -> dict[SessionKey, Any]:
        try:
            decoded = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as error:
            _LOGGER.warning("session_deserialization_failed", codec=self.name, error=str(error))
            raise DeserializationError(
                f"Failed to decode JSON session payload: {error}. "
                "Check that the payload was written by the json serializer."
            ) from error
        return _expect_mapping(decoded, self.name)


def resolve_codec(name: str) -> SessionCodec:
    """Return a codec instance by name.

    Args:
        name: Serializer name from configuration.

    Returns:
        Codec instance.

    Raises:
        SatchelConfigError: If the name is not supported.
    """
    if name == PickleCodec.name:
        return PickleCodec()
    if name == JsonCodec.name:
        return JsonCodec()
    raise SatchelConfigError(
        f"Unsupported serializer '{name}'. Use one of: {', '.join(SUPPORTED_SERIALIZERS)}."
    )


def _expect_mapping(decoded: object, codec_name: str) -> dict[SessionKey, Any]:
    if isinstance(decoded, dict):
        return decoded
    if isinstance(decoded, Mapping):
        return dict(decoded)
    _LOGGER.warning(
        "session_deserialization_failed",
        codec=codec_name,
        error=f"decoded {type(decoded).__name__}",
    )
    raise DeserializationError(
        f"Decoded session payload is a {type(decoded).__name__}, expected a mapping. "
        "Only payloads produced by serialize() can be restored."
    )
