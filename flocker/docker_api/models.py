"""Упрощённые структуры данных для описания объектов Docker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from flocker.hub.tag import Tag
from flocker.utils.helpers import to_mount_string

# FLUREE_PORT: порт, который сервер Fluree слушает внутри контейнера
FLUREE_PORT = 8090
FLUREE_DATA_PATH = "/opt/fluree-server/data"


class ContainerState(str, Enum):
    """Живое состояние контейнера по данным Docker."""

    RUNNING = "running"
    STOPPED = "stopped"
    NOT_FOUND = "not found"


@dataclass(slots=True)
class ContainerStatus:
    """Результат inspect для одного контейнера."""

    state: ContainerState
    id: str = ""
    name: str = ""
    port: int = FLUREE_PORT
    data_dir: Optional[str] = None
    started_at: Optional[str] = None

    @classmethod
    def not_found(cls, container_id: str = "") -> "ContainerStatus":
        return cls(state=ContainerState.NOT_FOUND, id=container_id)

    @property
    def short_id(self) -> str:
        return self.id[:12]


@dataclass(slots=True)
class FlureeImage:
    """Локальный образ Fluree."""

    tag: Tag
    id: str
    created: datetime
    size: int
    repository: str = "fluree/server"

    @property
    def reference(self) -> str:
        return self.tag.reference(self.repository)


@dataclass(slots=True)
class LedgerInfo:
    """Сводка по леджеру, прочитанная из его ns-файла внутри контейнера."""

    alias: str
    last_commit_time: str
    commit_count: int
    size: int
    path: str
    flakes_count: int = 0
    last_index: Optional[int] = None


@dataclass(slots=True)
class ContainerConfig:
    """Параметры запуска контейнера в терминах Docker."""

    host_port: int
    container_port: int = FLUREE_PORT
    data_mount_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.data_mount_path:
            self.data_mount_path = to_mount_string(self.data_mount_path)
