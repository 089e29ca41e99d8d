"""Runtime configuration model for Satchel.

This module owns all environment variable parsing and validation.
Storage classes consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_METADATA_KEY,
    DEFAULT_SERIALIZER,
    SUPPORTED_LOG_LEVELS,
    SUPPORTED_SERIALIZERS,
)
from core.errors import SatchelConfigError


@dataclass(frozen=True)
class SatchelConfig:
    """Validated runtime configuration.

    Attributes:
        metadata_key: Reserved top-level key holding the metadata region.
        serializer: Codec name used by serialize and deserialize.
        log_level: Minimum structured log level.
    """

    metadata_key: str = DEFAULT_METADATA_KEY
    serializer: str = DEFAULT_SERIALIZER
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "SatchelConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SatchelConfigError: If environment values are invalid.
        """
        metadata_key = os.getenv("SATCHEL_METADATA_KEY", DEFAULT_METADATA_KEY)
        serializer = os.getenv("SATCHEL_SERIALIZER", DEFAULT_SERIALIZER)
        log_level = os.getenv("SATCHEL_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            metadata_key=_parse_metadata_key(metadata_key),
            serializer=_parse_serializer(serializer),
            log_level=_parse_log_level(log_level),
        )


def _parse_metadata_key(raw_value: str) -> str:
    """Validate the reserved metadata key.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Stripped metadata key.

    Raises:
        SatchelConfigError: If the key is blank.
    """
    metadata_key = raw_value.strip()
    if not metadata_key:
        raise SatchelConfigError(
            "Invalid SATCHEL_METADATA_KEY value: expected a non-empty key. "
            "Unset it to use the default '__META'."
        )
    return metadata_key


def _parse_serializer(raw_value: str) -> str:
    serializer = raw_value.strip().lower()
    if serializer not in SUPPORTED_SERIALIZERS:
        raise SatchelConfigError(
            f"Invalid SATCHEL_SERIALIZER value '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_SERIALIZERS)}."
        )
    return serializer


def _parse_log_level(raw_value: str) -> str:
    log_level = raw_value.strip().upper()
    if log_level not in SUPPORTED_LOG_LEVELS:
        raise SatchelConfigError(
            f"Invalid SATCHEL_LOG_LEVEL value '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return log_level
