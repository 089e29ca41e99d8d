"""Core constants used across Satchel modules.

This module centralizes reserved metadata names and defaults.
Keeping values here avoids magic literals in storage logic.
"""

from __future__ import annotations

DEFAULT_METADATA_KEY = "__META"
DEFAULT_SERIALIZER = "pickle"
DEFAULT_LOG_LEVEL = "WARNING"
SUPPORTED_SERIALIZERS = ("pickle", "json")
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
IMMUTABLE_METADATA_KEY = "_IMMUTABLE"
READONLY_METADATA_KEY = "_READONLY"
LOCKS_METADATA_KEY = "_LOCKS"
REQUEST_ACCESS_TIME_METADATA_KEY = "_REQUEST_ACCESS_TIME"
AMBIENT_CONTEXT_NAME = "satchel_session"
