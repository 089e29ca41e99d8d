"""Unit tests for CLI command handling."""

from __future__ import annotations

import json

from cli.main import main
from core.config import SatchelConfig
from storage.session_storage import ArrayStorage


def _write_session(tmp_path, serializer: str = "pickle"):
    config = SatchelConfig(serializer=serializer)
    storage = ArrayStorage({"user": "ada", "cart": [1, 2]}, config=config)
    storage.set_metadata("expiry", {"cart": 60})
    storage.lock("cart")
    session_path = tmp_path / "session.bin"
    session_path.write_bytes(storage.serialize())
    return session_path


def test_cli_inspect_prints_summary(tmp_path, capsys) -> None:
    """Inspect should print locks and keys as JSON."""
    session_path = _write_session(tmp_path)

    exit_code = main(["--serializer", "pickle", "inspect", str(session_path)])
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0 and output["locked_keys"] == ["cart"]
    assert output["user_keys"] == ["user", "cart"] and "metadata" not in output


def test_cli_inspect_with_metadata(tmp_path, capsys) -> None:
    """Inspect should include the metadata region on request."""
    session_path = _write_session(tmp_path)

    exit_code = main(["--serializer", "pickle", "inspect", str(session_path), "--metadata"])
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0 and output["metadata"]["expiry"] == {"cart": 60}


def test_cli_dump_hides_metadata_by_default(tmp_path, capsys) -> None:
    """Dump should print only user data unless asked otherwise."""
    session_path = _write_session(tmp_path, serializer="json")

    exit_code = main(["--serializer", "json", "dump", str(session_path)])
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0 and output == {"user": "ada", "cart": [1, 2]}


def test_cli_reports_undecodable_file(tmp_path, capsys) -> None:
    """Garbage payloads should exit with status 1 and an error message."""
    session_path = tmp_path / "broken.bin"
    session_path.write_bytes(b"garbage")

    exit_code = main(["--serializer", "json", "dump", str(session_path)])

    assert exit_code == 1 and "error:" in capsys.readouterr().err


def test_cli_reports_missing_file(tmp_path, capsys) -> None:
    """A missing file should exit with status 1."""
    exit_code = main(["inspect", str(tmp_path / "missing.bin")])

    assert exit_code == 1 and "Failed to read session file" in capsys.readouterr().err


def test_cli_dump_renders_tuple_keys(tmp_path, capsys) -> None:
    """Sessions with non-JSON keys should dump with repr keys."""
    storage = ArrayStorage({("a", 1): "x", 2: {"nested": ("t", b"b")}}, config=SatchelConfig())
    session_path = tmp_path / "session.bin"
    session_path.write_bytes(storage.serialize())

    exit_code = main(["--serializer", "pickle", "dump", str(session_path)])
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0 and output == {"('a', 1)": "x", "2": {"nested": ["t", "b'b'"]}}


def test_cli_inspect_metadata_with_tuple_keys(tmp_path, capsys) -> None:
    """Metadata keyed by tuples should render instead of crashing."""
    storage = ArrayStorage({("a", 1): "x"}, config=SatchelConfig())
    storage.set_metadata(("a", 1), {"expires": 10})
    session_path = tmp_path / "session.bin"
    session_path.write_bytes(storage.serialize())

    exit_code = main(["--serializer", "pickle", "inspect", str(session_path), "--metadata"])
    output = json.loads(capsys.readouterr().out)

    assert exit_code == 0 and output["metadata"]["('a', 1)"] == {"expires": 10}
