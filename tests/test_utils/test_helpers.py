"""Тесты вспомогательных утилит."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from flocker.utils.helpers import (
    normalize_socket_path,
    parse_timestamp,
    relative_to_cwd,
    to_mount_string,
    utc_timestamp,
)


def test_normalize_socket_path_adds_unix_prefix() -> None:
    assert normalize_socket_path("/var/run/docker.sock") == "unix:///var/run/docker.sock"


def test_normalize_socket_path_keeps_existing_scheme() -> None:
    assert normalize_socket_path("unix:///var/run/docker.sock") == "unix:///var/run/docker.sock"
    assert normalize_socket_path("tcp://127.0.0.1:2375") == "tcp://127.0.0.1:2375"


def test_normalize_socket_path_keeps_relative_and_empty_values() -> None:
    assert normalize_socket_path("custom-socket") == "custom-socket"
    assert normalize_socket_path("  ") == ""


def test_relative_to_cwd(tmp_path: Path) -> None:
    assert relative_to_cwd(tmp_path / "data", tmp_path) == "./data"
    assert relative_to_cwd(tmp_path, tmp_path) == "."
    assert relative_to_cwd(Path("/elsewhere"), tmp_path) is None


def test_to_mount_string() -> None:
    assert to_mount_string("C:\\Users\\me\\data\\") == "C:/Users/me/data"
    assert to_mount_string("/srv/data/") == "/srv/data"
    assert to_mount_string("/") == "/"


def test_parse_timestamp_variants() -> None:
    expected = datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=UTC)
    assert parse_timestamp("2024-05-01T10:00:00.123456789Z") == expected
    assert parse_timestamp("2024-05-01T12:00:00.123456+02:00") == expected
    assert parse_timestamp("2024-05-01T10:00:00").tzinfo is UTC


def test_parse_timestamp_invalid() -> None:
    with pytest.raises(ValueError):
        parse_timestamp("not a time")


def test_utc_timestamp_roundtrip() -> None:
    stamp = utc_timestamp()
    assert stamp.endswith("Z")
    assert parse_timestamp(stamp) <= datetime.now(UTC)
