"""Параметры нового контейнера Fluree, собранные у пользователя."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from flocker.docker_api.models import ContainerConfig
from flocker.settings.validators import PORT_VALIDATOR

LOGGER = logging.getLogger(__name__)


class ConfigError(Exception):
    """Параметры контейнера некорректны."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        LOGGER.error("%s | context=%s", message, self.context)


@dataclass(slots=True)
class FlureeConfig:
    """Порт хоста и каталог данных, которые пользователь выбрал для контейнера."""

    host_port: int = 8090
    data_mount: Optional[Path] = None

    def validate(self) -> None:
        is_valid, error = PORT_VALIDATOR.validate(self.host_port)
        if not is_valid:
            raise ConfigError(f"Invalid host port: {error}", context={"port": self.host_port})
        if self.data_mount is None:
            return
        if not self.data_mount.exists():
            raise ConfigError(
                f"Data mount path does not exist: {self.data_mount}",
                context={"path": str(self.data_mount)},
            )
        if not self.data_mount.is_dir():
            raise ConfigError(
                f"Data mount path is not a directory: {self.data_mount}",
                context={"path": str(self.data_mount)},
            )

    def into_container_config(self) -> ContainerConfig:
        return ContainerConfig(
            host_port=self.host_port,
            data_mount_path=str(self.data_mount) if self.data_mount else None,
        )
