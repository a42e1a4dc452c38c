"""Шлюз к Docker для интерактивной сессии.

Файл описывает протокол ``DockerGateway``, через который сессия обращается
к Docker, и класс ``DockerManager``, который связывает функции из
``flocker.docker_api`` с одним клиентом и группой настроек ``docker``.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Protocol

from flocker.docker_api import containers, images, ledgers
from flocker.docker_api.client import DockerClientWrapper
from flocker.docker_api.images import ProgressCallback
from flocker.docker_api.models import ContainerConfig, ContainerStatus, FlureeImage, LedgerInfo
from flocker.settings.registry import SettingsRegistry

LOGGER = logging.getLogger(__name__)


class DockerGateway(Protocol):
    """Операции Docker, которые нужны сессии; все ключуются id контейнера."""

    def get_container_status(self, container_id: str) -> ContainerStatus: ...

    def is_port_in_use(self, port: int) -> bool: ...

    def create_and_start_container(
        self, image: FlureeImage, config: ContainerConfig, name: str
    ) -> str: ...

    def start_container(self, container_id: str) -> None: ...

    def stop_container(self, container_id: str) -> None: ...

    def remove_container(self, container_id: str) -> None: ...

    def fetch_logs(self, container_id: str, tail: Optional[int] = None) -> str: ...

    def follow_logs(self, container_id: str) -> Iterator[str]: ...

    def fetch_stats(self, container_id: str) -> str: ...

    def list_local_images(self) -> List[FlureeImage]: ...

    def get_image_by_tag(self, tag: str) -> FlureeImage: ...

    def pull_image(self, tag: str, on_progress: Optional[ProgressCallback] = None) -> None: ...

    def list_ledgers(self, container_id: str) -> List[LedgerInfo]: ...

    def get_ledger_details(self, container_id: str, path: str) -> str: ...

    def delete_ledger(self, container_id: str, path: str) -> None: ...


class DockerManager:
    """Предоставляет высокоуровневый API для работы с контейнерами Fluree."""

    def __init__(self, client: DockerClientWrapper, settings: SettingsRegistry) -> None:
        self._client = client
        self._settings = settings

    @classmethod
    def connect(cls, settings: SettingsRegistry) -> "DockerManager":
        """Создаёт клиент по адресу из настроек (пустой адрес = окружение)."""

        base_url = str(settings.get_value("docker", "base_url", default=""))
        return cls(DockerClientWrapper(base_url), settings)

    # ------------------------------------------------------------------ helpers
    @property
    def repository(self) -> str:
        return str(self._settings.get_value("docker", "image_repository", default="fluree/server"))

    @property
    def data_path(self) -> str:
        return str(
            self._settings.get_value("docker", "data_path", default="/opt/fluree-server/data")
        )

    def ping(self) -> bool:
        return self._client.ping()

    # --------------------------------------------------------------- containers
    def get_container_status(self, container_id: str) -> ContainerStatus:
        return containers.get_container_status(self._client, container_id)

    def is_port_in_use(self, port: int) -> bool:
        return containers.is_port_in_use(self._client, port)

    def create_and_start_container(
        self, image: FlureeImage, config: ContainerConfig, name: str
    ) -> str:
        container_port = int(self._settings.get_value("docker", "container_port", default=8090))
        config.container_port = container_port
        return containers.create_and_start_container(
            self._client, image.reference, config, name, data_path=self.data_path
        )

    def start_container(self, container_id: str) -> None:
        containers.start_container(self._client, container_id)
        LOGGER.info("Container %s started", container_id)

    def stop_container(self, container_id: str) -> None:
        containers.stop_container(self._client, container_id)
        LOGGER.info("Container %s stopped", container_id)

    def remove_container(self, container_id: str) -> None:
        containers.remove_container(self._client, container_id, force=True)
        LOGGER.info("Container %s removed", container_id)

    def fetch_logs(self, container_id: str, tail: Optional[int] = None) -> str:
        if tail is None:
            tail = int(self._settings.get_value("docker", "logs_tail", default=1000))
        return containers.fetch_logs(self._client, container_id, tail=tail)

    def follow_logs(self, container_id: str) -> Iterator[str]:
        return containers.follow_logs(self._client, container_id)

    def fetch_stats(self, container_id: str) -> str:
        return containers.fetch_stats(self._client, container_id)

    # ------------------------------------------------------------------- images
    def list_local_images(self) -> List[FlureeImage]:
        return images.list_local_images(self._client, self.repository)

    def get_image_by_tag(self, tag: str) -> FlureeImage:
        return images.get_image_by_tag(self._client, self.repository, tag)

    def pull_image(self, tag: str, on_progress: Optional[ProgressCallback] = None) -> None:
        images.pull_image(self._client, self.repository, tag, on_progress)

    # ------------------------------------------------------------------ ledgers
    def list_ledgers(self, container_id: str) -> List[LedgerInfo]:
        return ledgers.list_ledgers(self._client, container_id, data_path=self.data_path)

    def get_ledger_details(self, container_id: str, path: str) -> str:
        return ledgers.get_ledger_details(self._client, container_id, path)

    def delete_ledger(self, container_id: str, path: str) -> None:
        ledgers.delete_ledger(self._client, container_id, path)
