"""Различные вспомогательные функции."""

from __future__ import annotations

import os
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional


_SOCKET_SCHEMES = ("unix://", "tcp://", "npipe://", "http://", "https://", "ssh://")


def normalize_socket_path(raw_value: str) -> str:
    """Возвращает путь сокета с корректным префиксом unix://."""

    value = raw_value.strip()
    if not value:
        return value
    lowered = value.lower()
    if lowered.startswith(_SOCKET_SCHEMES):
        return value
    if value.startswith("/"):
        return f"unix://{value}"
    return value


def relative_to_cwd(path: Path, cwd: Path) -> Optional[str]:
    """Возвращает путь относительно cwd либо None, если он лежит вне cwd."""

    try:
        relative = path.relative_to(cwd)
    except ValueError:
        return None
    if str(relative) == ".":
        return "."
    return f".{os.sep}{relative}"


def to_mount_string(path: str) -> str:
    """Приводит путь хоста к виду, который принимает Docker в binds."""

    normalized = path.replace("\\", "/")
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized


_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: str) -> datetime:
    """Разбирает метку RFC3339 в datetime с часовым поясом (UTC по умолчанию).

    Docker отдаёт наносекунды, поэтому дробная часть урезается до микросекунд.
    """

    normalized = _FRACTION_RE.sub(r"\1", value.strip())
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def utc_timestamp() -> str:
    """Текущее время в формате RFC3339 (UTC)."""

    return datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")
