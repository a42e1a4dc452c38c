"""Работа с Docker: клиент, контейнеры, образы и леджеры Fluree."""

from .exceptions import DockerAPIError
from .gateway import DockerGateway, DockerManager
from .models import ContainerConfig, ContainerState, ContainerStatus, FlureeImage, LedgerInfo

__all__ = [
    "ContainerConfig",
    "ContainerState",
    "ContainerStatus",
    "DockerAPIError",
    "DockerGateway",
    "DockerManager",
    "FlureeImage",
    "LedgerInfo",
]
