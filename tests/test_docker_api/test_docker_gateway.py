"""Тесты DockerManager: связь функций docker_api с настройками."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List

import pytest
from docker.errors import DockerException

from flocker.docker_api import client as client_module
from flocker.docker_api import containers, images, ledgers
from flocker.docker_api.client import DockerClientWrapper
from flocker.docker_api.exceptions import DockerAPIError
from flocker.docker_api.gateway import DockerManager
from flocker.docker_api.models import ContainerConfig, FlureeImage
from flocker.hub.tag import Tag
from flocker.settings.registry import SettingsRegistry


class FakePingClient:
    def __init__(self, healthy: bool = True) -> None:
        self.healthy = healthy

    def ping(self) -> bool:
        if not self.healthy:
            raise DockerException("connection refused")
        return True


@pytest.fixture
def settings(tmp_path: Path) -> SettingsRegistry:
    registry = SettingsRegistry(tmp_path / "settings.json")
    registry.set_value("docker", "image_repository", "registry.local/fluree")
    registry.set_value("docker", "data_path", "/data")
    registry.set_value("docker", "container_port", 8091)
    registry.set_value("docker", "logs_tail", 25)
    return registry


@pytest.fixture
def manager(settings: SettingsRegistry) -> DockerManager:
    return DockerManager(DockerClientWrapper(raw_client=FakePingClient()), settings)


def test_properties_follow_settings(manager: DockerManager) -> None:
    assert manager.repository == "registry.local/fluree"
    assert manager.data_path == "/data"
    assert manager.ping() is True


def test_ping_failure_returns_false(settings: SettingsRegistry) -> None:
    manager = DockerManager(DockerClientWrapper(raw_client=FakePingClient(False)), settings)
    assert manager.ping() is False


def test_create_uses_settings(manager: DockerManager, monkeypatch: pytest.MonkeyPatch) -> None:
    captured: Dict[str, Any] = {}

    def fake_create(client: Any, reference: str, config: ContainerConfig, name: str, *, data_path: str) -> str:
        captured.update(reference=reference, config=config, name=name, data_path=data_path)
        return "new-id"

    monkeypatch.setattr(containers, "create_and_start_container", fake_create)
    image = FlureeImage(
        tag=Tag("v3"),
        id="sha256:1",
        created=datetime.now(UTC),
        size=1,
        repository="registry.local/fluree",
    )
    result = manager.create_and_start_container(image, ContainerConfig(host_port=9000), "demo")
    assert result == "new-id"
    assert captured["reference"] == "registry.local/fluree:v3"
    assert captured["config"].container_port == 8091
    assert captured["data_path"] == "/data"


def test_fetch_logs_default_tail(manager: DockerManager, monkeypatch: pytest.MonkeyPatch) -> None:
    tails: List[int] = []

    def fake_logs(client: Any, container_id: str, *, tail: int) -> str:
        tails.append(tail)
        return "logs"

    monkeypatch.setattr(containers, "fetch_logs", fake_logs)
    manager.fetch_logs("abc")
    manager.fetch_logs("abc", tail=5)
    assert tails == [25, 5]


def test_images_and_ledgers_use_repository_and_data_path(
    manager: DockerManager, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: Dict[str, Any] = {}

    def fake_images(client: Any, repository: str) -> List[FlureeImage]:
        seen["repo"] = repository
        return []

    def fake_ledgers(client: Any, container_id: str, *, data_path: str) -> List[Any]:
        seen["data_path"] = data_path
        return []

    monkeypatch.setattr(images, "list_local_images", fake_images)
    monkeypatch.setattr(ledgers, "list_ledgers", fake_ledgers)
    assert manager.list_local_images() == []
    assert manager.list_ledgers("abc") == []
    assert seen == {"repo": "registry.local/fluree", "data_path": "/data"}


def test_connect_failure_raises_docker_api_error(
    settings: SettingsRegistry, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken_from_env() -> Any:
        raise DockerException("Error while fetching server API version")

    monkeypatch.setattr(client_module.docker, "from_env", broken_from_env)
    settings.set_value("docker", "base_url", "")
    with pytest.raises(DockerAPIError, match="Failed to connect to Docker"):
        DockerManager.connect(settings)


def test_connect_normalizes_socket_path(
    settings: SettingsRegistry, monkeypatch: pytest.MonkeyPatch
) -> None:
    used: List[str] = []

    def fake_client(base_url: str) -> FakePingClient:
        used.append(base_url)
        return FakePingClient()

    monkeypatch.setattr(client_module.docker, "DockerClient", fake_client)
    settings.set_value("docker", "base_url", "/var/run/docker.sock")
    manager = DockerManager.connect(settings)
    assert used == ["unix:///var/run/docker.sock"]
    assert manager.ping() is True
