"""Модели данных реестра: запись контейнера и описание каталога данных."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from flocker.settings.validators import NON_EMPTY_STRING_VALIDATOR, PORT_VALIDATOR, Validator
from flocker.state.exceptions import RecordValidationError
from flocker.utils.helpers import parse_timestamp, relative_to_cwd, utc_timestamp

LOGGER = logging.getLogger(__name__)

# DEFAULT_PORT: порт хоста, который предлагается, пока реестр пуст
DEFAULT_PORT = 8090


@dataclass(slots=True)
class DataDirConfig:
    """Каталог хоста, смонтированный в контейнер для хранения данных."""

    absolute_path: str
    relative_path: Optional[str] = None

    def display_relative_path(self) -> str:
        """Возвращает путь в том виде, в котором его вводил пользователь."""

        return self.relative_path if self.relative_path else self.absolute_path

    @classmethod
    def from_current_dir(cls, current_dir: Path) -> "DataDirConfig":
        """Предложение по умолчанию: ./data в текущем каталоге."""

        return cls(absolute_path=str(current_dir / "data"), relative_path="./data")

    @classmethod
    def from_user_path(cls, raw_path: str, current_dir: Path) -> "DataDirConfig":
        """Разрешает введённый путь (включая симлинки) относительно current_dir.

        Каталог должен существовать: resolve(strict=True) бросает OSError.
        """

        candidate = Path(raw_path).expanduser()
        if not candidate.is_absolute():
            candidate = current_dir / candidate
        resolved = candidate.resolve(strict=True)
        relative = None
        if not Path(raw_path).expanduser().is_absolute():
            relative = relative_to_cwd(resolved, current_dir.resolve())
        return cls(absolute_path=str(resolved), relative_path=relative)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relative_path": self.relative_path,
            "absolute_path": self.absolute_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataDirConfig":
        absolute_path = data.get("absolute_path")
        if not isinstance(absolute_path, str) or not absolute_path:
            raise RecordValidationError("data_dir.absolute_path", absolute_path, "path is required")
        relative_path = data.get("relative_path")
        return cls(
            absolute_path=absolute_path,
            relative_path=str(relative_path) if relative_path else None,
        )


@dataclass(slots=True)
class ContainerRecord:
    """Снимок одного созданного пользователем контейнера.

    Поле ``last_start`` по умолчанию получает текущее время: создание и
    первый запуск для пользователя одно и то же событие. Явный ``None``
    оставляет запись «никогда не запускавшейся».
    """

    id: str
    name: str
    port: int
    data_dir: Optional[DataDirConfig] = None
    image_tag: str = "fluree/server:latest"
    last_start: Optional[str] = field(default_factory=utc_timestamp)
    detached: bool = True

    def __post_init__(self) -> None:
        self._check("id", self.id, NON_EMPTY_STRING_VALIDATOR)
        self._check("name", self.name, NON_EMPTY_STRING_VALIDATOR)
        self._check("port", self.port, PORT_VALIDATOR)
        self._check("image_tag", self.image_tag, NON_EMPTY_STRING_VALIDATOR)
        if self.last_start is not None and not isinstance(self.last_start, str):
            raise RecordValidationError("last_start", self.last_start, "must be a string or null")

    @staticmethod
    def _check(field_name: str, value: Any, validator: Validator) -> None:
        is_valid, error = validator.validate(value)
        if not is_valid:
            raise RecordValidationError(field_name, value, error)

    def started_at(self) -> Optional[datetime]:
        """Время последнего запуска или None, если его нет или оно нечитаемо."""

        if not self.last_start or not isinstance(self.last_start, str):
            return None
        try:
            return parse_timestamp(self.last_start)
        except ValueError:
            LOGGER.debug("Unparsable last_start %r for container %s", self.last_start, self.id)
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "port": self.port,
            "data_dir": self.data_dir.to_dict() if self.data_dir else None,
            "image_tag": self.image_tag,
            "last_start": self.last_start,
            "detached": self.detached,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContainerRecord":
        data_dir = data.get("data_dir")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            port=data.get("port", 0),
            data_dir=DataDirConfig.from_dict(data_dir) if isinstance(data_dir, dict) else None,
            image_tag=data.get("image_tag", ""),
            last_start=data.get("last_start"),
            detached=bool(data.get("detached", True)),
        )
