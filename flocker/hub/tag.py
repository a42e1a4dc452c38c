"""Тег образа fluree/server, как его отдаёт Docker Hub."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Dict, Optional

from flocker.utils.helpers import parse_timestamp


@dataclass(slots=True)
class Tag:
    """Имя тега и время его последнего обновления (RFC3339)."""

    name: str
    last_updated: str = ""

    def reference(self, repository: str) -> str:
        """Полная ссылка на образ: ``repository:name``."""

        return f"{repository}:{self.name}"

    def pretty_print(self, repository: str, max_tag_length: Optional[int] = None) -> str:
        name = self.name.ljust(max_tag_length) if max_tag_length else self.name
        try:
            updated = self.updated_ago()
        except ValueError:
            updated = "unknown time ago"
        return f"{repository}:{name} (updated {updated})"

    def updated_ago(self, now: Optional[datetime] = None) -> str:
        """Возраст тега с точностью до дня; ValueError для нечитаемой даты."""

        moment = parse_timestamp(self.last_updated)
        days = ((now or datetime.now(UTC)) - moment).days
        if days // 365 > 0:
            return f"{days // 365} years ago"
        if days // 30 > 0:
            return f"{days // 30} months ago"
        if days // 7 > 0:
            return f"{days // 7} weeks ago"
        return f"{days} days ago"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tag":
        return cls(name=str(data.get("name", "")), last_updated=str(data.get("last_updated") or ""))
