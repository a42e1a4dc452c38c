"""Функции для работы с контейнерами Fluree через Docker client."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, Optional

from docker.errors import DockerException, NotFound

from flocker.docker_api.client import DockerClientWrapper
from flocker.docker_api.exceptions import DockerAPIError
from flocker.docker_api.models import (
    FLUREE_DATA_PATH,
    FLUREE_PORT,
    ContainerConfig,
    ContainerState,
    ContainerStatus,
)

LOGGER = logging.getLogger(__name__)


def get_container_status(client: DockerClientWrapper, container_id: str) -> ContainerStatus:
    """Возвращает живое состояние контейнера; удалённый контейнер даёт NOT_FOUND."""

    raw = client.get_raw_client()
    try:
        container = raw.containers.get(container_id)
    except NotFound:
        LOGGER.debug("Container %s not found", container_id)
        return ContainerStatus.not_found(container_id)
    except DockerException as exc:
        raise DockerAPIError(
            f"Failed to inspect container: {exc}", context={"container_id": container_id}
        ) from exc

    attrs: Dict[str, Any] = getattr(container, "attrs", {}) or {}
    state = attrs.get("State") or {}
    host_config = attrs.get("HostConfig") or {}
    name = (attrs.get("Name") or getattr(container, "name", "") or "").lstrip("/")
    running = bool(state.get("Running"))
    binds = host_config.get("Binds") or []
    return ContainerStatus(
        state=ContainerState.RUNNING if running else ContainerState.STOPPED,
        id=container_id,
        name=name,
        port=_bound_host_port(host_config.get("PortBindings") or {}),
        data_dir=binds[0] if binds else None,
        started_at=state.get("StartedAt"),
    )


def is_port_in_use(client: DockerClientWrapper, port: int) -> bool:
    """Проверяет, публикует ли какой-либо запущенный контейнер указанный порт хоста."""

    raw = client.get_raw_client()
    try:
        running = raw.containers.list(filters={"status": "running"})
    except DockerException as exc:
        raise DockerAPIError(f"Failed to list containers: {exc}") from exc

    for container in running:
        attrs = getattr(container, "attrs", None) or {}
        ports = (attrs.get("NetworkSettings") or {}).get("Ports") or {}
        for mappings in ports.values():
            for mapping in mappings or []:
                if str(mapping.get("HostPort")) == str(port):
                    LOGGER.debug("Port %s is published by %s", port, container.name)
                    return True
    return False


def create_and_start_container(
    client: DockerClientWrapper,
    image_reference: str,
    config: ContainerConfig,
    name: str,
    *,
    data_path: str = FLUREE_DATA_PATH,
) -> str:
    """Создаёт и запускает контейнер Fluree, возвращает его идентификатор."""

    if is_port_in_use(client, config.host_port):
        raise DockerAPIError(
            f"Port {config.host_port} is already in use by another container",
            context={"port": config.host_port},
        )

    volumes = None
    if config.data_mount_path:
        volumes = [f"{config.data_mount_path}:{data_path}:rw"]

    raw = client.get_raw_client()
    try:
        container = raw.containers.create(
            image_reference,
            name=name,
            ports={f"{config.container_port}/tcp": ("0.0.0.0", config.host_port)},
            volumes=volumes,
        )
    except DockerException as exc:
        raise DockerAPIError(
            f"Failed to create container: {exc}", context={"image": image_reference, "name": name}
        ) from exc
    try:
        container.start()
    except DockerException as exc:
        raise DockerAPIError(
            f"Failed to start container: {exc}", context={"container_id": container.id}
        ) from exc
    LOGGER.info("Container %s (%s) started from %s", name, container.id, image_reference)
    return container.id


def start_container(client: DockerClientWrapper, container_id: str) -> None:
    """Запускает контейнер."""

    container = get_container(client, container_id)
    try:
        container.start()
    except DockerException as exc:
        raise DockerAPIError(f"Failed to start container: {exc}") from exc


def stop_container(client: DockerClientWrapper, container_id: str) -> None:
    """Останавливает контейнер."""

    container = get_container(client, container_id)
    try:
        container.stop()
    except DockerException as exc:
        raise DockerAPIError(f"Failed to stop container: {exc}") from exc


def remove_container(client: DockerClientWrapper, container_id: str, force: bool = True) -> None:
    """Удаляет контейнер (по умолчанию принудительно, даже запущенный)."""

    container = get_container(client, container_id)
    try:
        container.remove(force=force)
    except DockerException as exc:
        raise DockerAPIError(f"Failed to remove container: {exc}") from exc


def fetch_logs(client: DockerClientWrapper, container_id: str, *, tail: int = 1000) -> str:
    """Возвращает строку логов контейнера."""

    container = get_container(client, container_id)
    try:
        data = container.logs(stdout=True, stderr=True, tail=tail)
    except DockerException as exc:
        raise DockerAPIError(f"Failed to get container logs: {exc}") from exc
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return str(data)


def follow_logs(
    client: DockerClientWrapper, container_id: str, *, tail: Optional[int] = None
) -> Iterator[str]:
    """Отдаёт новые строки логов по мере появления, пока поток не закроется."""

    container = get_container(client, container_id)
    try:
        stream = container.logs(
            stdout=True, stderr=True, stream=True, follow=True, tail=tail if tail else "all"
        )
        for chunk in stream:
            if isinstance(chunk, bytes):
                yield chunk.decode("utf-8", errors="replace")
            else:
                yield str(chunk)
    except DockerException as exc:
        raise DockerAPIError(f"Failed to follow container logs: {exc}") from exc


def fetch_stats(client: DockerClientWrapper, container_id: str) -> str:
    """Снимок статистики в виде таблицы, похожей на вывод ``docker stats``."""

    container = get_container(client, container_id)
    try:
        raw_stats = container.stats(stream=False)
        if isinstance(raw_stats, (bytes, str)):
            raw_stats = json.loads(raw_stats)
    except (DockerException, ValueError) as exc:
        raise DockerAPIError(f"Failed to get container stats: {exc}") from exc

    cpu_percent = _calculate_cpu_percent(raw_stats)
    usage, limit, memory_percent = _calculate_memory(raw_stats)
    header = f"{'CONTAINER ID':<20}{'CPU %':<12}{'MEM USAGE / LIMIT':<26}{'MEM %':<8}"
    cpu = f"{cpu_percent:.2f}%"
    memory = f"{usage / 1024 / 1024:.1f}MiB / {limit / 1024 / 1024:.1f}MiB"
    row = f"{container_id[:12]:<20}{cpu:<12}{memory:<26}{memory_percent:.2f}%"
    return f"{header}\n{row}"


def get_container(client: DockerClientWrapper, container_id: str) -> Any:
    raw = client.get_raw_client()
    try:
        return raw.containers.get(container_id)
    except DockerException as exc:
        raise DockerAPIError(
            f"Container {container_id} is not available: {exc}",
            context={"container_id": container_id},
        ) from exc


def _bound_host_port(port_bindings: Dict[str, Any]) -> int:
    bindings = port_bindings.get(f"{FLUREE_PORT}/tcp") or []
    if not bindings:
        return FLUREE_PORT
    try:
        return int(bindings[0].get("HostPort"))
    except (TypeError, ValueError):
        return FLUREE_PORT


def _calculate_cpu_percent(stats: Dict[str, Any]) -> float:
    cpu_stats = stats.get("cpu_stats") or {}
    precpu = stats.get("precpu_stats") or {}
    cpu_delta = (cpu_stats.get("cpu_usage", {}).get("total_usage", 0)) - (
        precpu.get("cpu_usage", {}).get("total_usage", 0)
    )
    system_delta = cpu_stats.get("system_cpu_usage", 0) - precpu.get("system_cpu_usage", 0)
    online_cpus = (
        cpu_stats.get("online_cpus")
        or len(cpu_stats.get("cpu_usage", {}).get("percpu_usage", []) or [])
        or 1
    )
    if cpu_delta > 0 and system_delta > 0:
        return (cpu_delta / system_delta) * online_cpus * 100.0
    return 0.0


def _calculate_memory(stats: Dict[str, Any]) -> tuple[int, int, float]:
    memory_stats = stats.get("memory_stats") or {}
    usage = memory_stats.get("usage") or 0
    limit = memory_stats.get("limit") or 0
    percent = (usage / limit * 100) if limit else 0.0
    return usage, limit, percent
