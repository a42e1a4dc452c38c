"""Форматирование для терминала: размеры, возраст, выровненные колонки."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable, List, Mapping, Optional, Sequence

from flocker.utils.helpers import parse_timestamp

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def terminal_width(fallback: int = 80) -> int:
    return shutil.get_terminal_size((fallback, 24)).columns


def format_bytes(size: int) -> str:
    """1536 -> '1.5 KB'; байты выводятся без дробной части."""

    value = float(size)
    index = 0
    while value >= 1024 and index < len(_BYTE_UNITS) - 1:
        value /= 1024.0
        index += 1
    if index == 0:
        return f"{int(value)} B"
    return f"{value:.1f} {_BYTE_UNITS[index]}"


def format_duration_since(timestamp: str, now: Optional[datetime] = None) -> str:
    """Человекочитаемый возраст метки RFC3339; ValueError для нечитаемой метки."""

    moment = parse_timestamp(timestamp)
    delta = (now or datetime.now(UTC)) - moment
    days = delta.days
    if days // 365 > 0:
        return f"{days // 365} years ago"
    if days // 30 > 0:
        return f"{days // 30} months ago"
    if days // 7 > 0:
        return f"{days // 7} weeks ago"
    if days > 0:
        return f"{days} days ago"
    seconds = int(delta.total_seconds())
    if seconds // 3600 > 0:
        return f"{seconds // 3600} hours ago"
    if seconds // 60 > 0:
        return f"{seconds // 60} minutes ago"
    return "Seconds Ago"


def truncate(text: str, width: int) -> str:
    """Обрезает строку до ширины с многоточием либо дополняет пробелами."""

    if width <= 0:
        return ""
    if len(text) > width:
        if width <= 3:
            return text[:width]
        return f"{text[: width - 3]}..."
    return text.ljust(width)


@dataclass(slots=True)
class Column:
    """Описание одной колонки таблицы."""

    header: str
    key: str
    share: float = 0.2  # доля ширины терминала, больше которой колонка не растёт
    formatter: Callable[[Any], str] | None = None

    def render(self, value: Any) -> str:
        """Возвращает строку для отображения."""

        if self.formatter:
            return self.formatter(value)
        if value is None:
            return ""
        return str(value)


class TableFormatter:
    """Выравнивает строки по колонкам для пунктов меню выбора."""

    def __init__(self, columns: Sequence[Column], width: Optional[int] = None) -> None:
        self._columns = list(columns)
        self._width = width if width is not None else terminal_width()

    def column_widths(self, rows: Sequence[Mapping[str, Any]]) -> List[int]:
        widths = []
        for column in self._columns:
            cap = max(int(self._width * column.share), 1)
            longest = max(
                [len(column.header)] + [len(column.render(row.get(column.key))) for row in rows]
            )
            widths.append(min(longest, cap))
        return widths

    def format_header(self, rows: Sequence[Mapping[str, Any]]) -> str:
        widths = self.column_widths(rows)
        cells = [truncate(column.header, width) for column, width in zip(self._columns, widths)]
        return " ".join(cells).rstrip()

    def format_rows(self, rows: Sequence[Mapping[str, Any]]) -> List[str]:
        widths = self.column_widths(rows)
        lines = []
        for row in rows:
            cells = [
                truncate(column.render(row.get(column.key)), width)
                for column, width in zip(self._columns, widths)
            ]
            lines.append(" ".join(cells).rstrip())
        return lines
