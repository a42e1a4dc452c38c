"""Обёртка над docker-py с безопасной инициализацией."""

from __future__ import annotations

import logging
from typing import Any

import docker
from docker.errors import DockerException

from flocker.docker_api.exceptions import DockerAPIError
from flocker.utils.helpers import normalize_socket_path

LOGGER = logging.getLogger(__name__)


class DockerClientWrapper:
    """Управляет созданием и использованием docker API client.

    Пустой ``base_url`` означает настройки окружения (DOCKER_HOST и т.п.).
    """

    def __init__(self, base_url: str = "", raw_client: Any | None = None) -> None:
        self.base_url = normalize_socket_path(base_url)  # Сохраняем адрес демона
        self._client = raw_client or self._create_client()  # Создаём docker client

    def _create_client(self) -> Any:
        try:
            if not self.base_url:
                return docker.from_env()
            return docker.DockerClient(base_url=self.base_url)
        except DockerException as exc:
            LOGGER.error(
                "Docker client init error via %s: %s",
                self.base_url or "environment defaults",
                exc,
            )
            raise DockerAPIError(
                f"Failed to connect to Docker: {exc}",
                context={"base_url": self.base_url},
            ) from exc

    def get_raw_client(self) -> Any:
        """Возвращает внутренний docker client."""

        return self._client

    def ping(self) -> bool:
        """Проверяет доступность Docker."""

        try:
            self._client.ping()
            return True
        except DockerException as exc:
            LOGGER.error("Docker ping failed: %s", exc)
            return False
