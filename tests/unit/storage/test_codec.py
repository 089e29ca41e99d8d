"""Unit tests for session payload codecs."""

from __future__ import annotations

import json
import pickle

import pytest

from core.errors import DeserializationError, SatchelConfigError, SerializationError
from storage.codec import JsonCodec, PickleCodec, resolve_codec


def test_pickle_codec_keeps_integer_keys_and_tuples() -> None:
    """Pickle should round-trip values JSON cannot represent."""
    codec = PickleCodec()
    data = {1: ("a", "b"), "__META": {"_LOCKS": {1: True}}}

    assert codec.decode(codec.encode(data)) == data


def test_pickle_codec_rejects_non_mapping_payload() -> None:
    """A pickled list is not a session dictionary."""
    with pytest.raises(DeserializationError):
        PickleCodec().decode(pickle.dumps([1, 2, 3]))


def test_pickle_codec_rejects_truncated_payload() -> None:
    """Truncated bytes should raise a deserialization error."""
    payload = PickleCodec().encode({"a": "value"})

    with pytest.raises(DeserializationError):
        PickleCodec().decode(payload[:5])


def test_pickle_codec_raises_for_unpicklable_values() -> None:
    """Values like lambdas should fail with a serialization error."""
    with pytest.raises(SerializationError):
        PickleCodec().encode({"callback": lambda: None})


def test_json_codec_encodes_utf8_text() -> None:
    """JSON payloads should be readable UTF-8 documents."""
    payload = JsonCodec().encode({"name": "Zoë"})

    assert json.loads(payload.decode("utf-8")) == {"name": "Zoë"}


def test_json_codec_raises_for_non_json_values() -> None:
    """Sets are not JSON-serializable."""
    with pytest.raises(SerializationError):
        JsonCodec().encode({"tags": {"a", "b"}})


def test_json_codec_rejects_invalid_document() -> None:
    """Malformed JSON should raise a deserialization error."""
    with pytest.raises(DeserializationError):
        JsonCodec().decode(b"{not json")


def test_json_codec_rejects_non_object_document() -> None:
    """A JSON array is not a session dictionary."""
    with pytest.raises(DeserializationError):
        JsonCodec().decode(b"[1, 2]")


def test_resolve_codec_by_name() -> None:
    """Known names should map to codec instances."""
    assert resolve_codec("pickle").name == "pickle" and resolve_codec("json").name == "json"


def test_resolve_codec_raises_for_unknown_name() -> None:
    """Unknown serializer names are configuration errors."""
    with pytest.raises(SatchelConfigError):
        resolve_codec("yaml")
