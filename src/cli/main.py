"""Satchel CLI entry points.
This module exposes developer commands for inspecting persisted sessions.
It maps argparse commands onto storage and codec calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import SatchelConfig
from core.constants import SUPPORTED_SERIALIZERS
from core.errors import SatchelError, SatchelStorageError
from core.logging_config import configure_logging
from core.types import SessionKey
from storage.codec import resolve_codec
from storage.inspection import summarize_payload, summary_to_payload


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="satchel", description="Satchel session tools")
    parser.add_argument(
        "--serializer",
        choices=SUPPORTED_SERIALIZERS,
        help="Override SATCHEL_SERIALIZER for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_inspect_command(subparsers)
    _add_dump_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Satchel CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.serializer)
        configure_logging(config.log_level)
        if args.command == "inspect":
            return _run_inspect_command(config, args)
        if args.command == "dump":
            return _run_dump_command(config, args)
    except SatchelError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(serializer: str | None) -> SatchelConfig:
    config = SatchelConfig.from_env()
    if serializer:
        config = replace(config, serializer=serializer)
    return config


def _run_inspect_command(config: SatchelConfig, args: argparse.Namespace) -> int:
    """Handle inspect command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    payload = _load_session_file(config, args.path)
    summary = summary_to_payload(summarize_payload(payload, config))
    if args.metadata:
        summary["metadata"] = _json_safe(payload.get(config.metadata_key, {}))
    print(json.dumps(summary, indent=2))
    return 0


def _run_dump_command(config: SatchelConfig, args: argparse.Namespace) -> int:
    """Handle dump command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    payload = _load_session_file(config, args.path)
    if not args.metadata:
        payload.pop(config.metadata_key, None)
    print(json.dumps(_json_safe(payload), indent=2))
    return 0


def _load_session_file(config: SatchelConfig, path: str) -> dict[SessionKey, Any]:
    """Read and decode a serialized session file.

    Raises:
        SatchelStorageError: If the file cannot be read.
        DeserializationError: If the payload cannot be decoded.
    """
    session_file = Path(path).expanduser().resolve()
    try:
        raw_payload = session_file.read_bytes()
    except OSError as error:
        raise SatchelStorageError(
            f"Failed to read session file at {session_file}: {error}. "
            "Check the path and file permissions."
        ) from error
    return resolve_codec(config.serializer).decode(raw_payload)


def _json_safe(value: object) -> Any:
    """Convert decoded session data into JSON-native values.

    Keys JSON cannot hold, such as tuples, and non-JSON values are
    rendered with ``repr``.
    """
    if isinstance(value, dict):
        return {_json_key(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


def _json_key(key: object) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, (int, float, bool)) or key is None:
        return json.dumps(key)
    return repr(key)


def _add_inspect_command(subparsers: Any) -> None:
    """Register inspect subcommand."""
    parser = subparsers.add_parser(
        "inspect",
        help="Summarize locks, flags, and keys of a serialized session",
    )
    parser.add_argument("path", help="Serialized session file")
    parser.add_argument(
        "--metadata",
        action="store_true",
        help="Also print the metadata region",
    )


def _add_dump_command(subparsers: Any) -> None:
    """Register dump subcommand."""
    parser = subparsers.add_parser("dump", help="Print a serialized session as JSON")
    parser.add_argument("path", help="Serialized session file")
    parser.add_argument(
        "--metadata",
        action="store_true",
        help="Keep the metadata region in the output",
    )
