"""Функции для работы с образами Fluree."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Callable, List, Optional

from docker.errors import DockerException

from flocker.docker_api.client import DockerClientWrapper
from flocker.docker_api.exceptions import DockerAPIError
from flocker.docker_api.models import FlureeImage
from flocker.hub.tag import Tag
from flocker.utils.helpers import parse_timestamp

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


def list_local_images(client: DockerClientWrapper, repository: str) -> List[FlureeImage]:
    """Возвращает локальные образы, помеченные тегами указанного репозитория."""

    raw = client.get_raw_client()
    try:
        found = raw.images.list(name=repository)
    except DockerException as exc:
        raise DockerAPIError(
            f"Failed to list images. Is the docker daemon running? ({exc})"
        ) from exc

    prefix = f"{repository}:"
    result: List[FlureeImage] = []
    for image in found:
        for reference in getattr(image, "tags", []) or []:
            if not reference.startswith(prefix):
                continue
            result.append(_to_fluree_image(image, reference[len(prefix):], repository))
    return result


def get_image_by_tag(client: DockerClientWrapper, repository: str, tag: str) -> FlureeImage:
    """Находит локальный образ ``repository:tag``."""

    raw = client.get_raw_client()
    try:
        image = raw.images.get(f"{repository}:{tag}")
    except DockerException as exc:
        raise DockerAPIError(
            f"Failed to get image: {exc}", context={"image": f"{repository}:{tag}"}
        ) from exc
    return _to_fluree_image(image, tag, repository)


def pull_image(
    client: DockerClientWrapper,
    repository: str,
    tag: str,
    on_progress: Optional[ProgressCallback] = None,
) -> None:
    """Скачивает образ, передавая строки прогресса ``status: progress`` в callback."""

    raw = client.get_raw_client()
    try:
        for event in raw.api.pull(repository, tag=tag, stream=True, decode=True):
            if "error" in event:
                raise DockerAPIError(
                    f"Failed to pull image: {event['error']}",
                    context={"image": f"{repository}:{tag}"},
                )
            status = event.get("status")
            if status and on_progress is not None:
                progress = event.get("progress")
                on_progress(f"{status}: {progress}" if progress else status)
    except DockerException as exc:
        raise DockerAPIError(
            f"Failed to pull image: {exc}", context={"image": f"{repository}:{tag}"}
        ) from exc
    LOGGER.info("Pulled image %s:%s", repository, tag)


def _to_fluree_image(image: Any, tag_name: str, repository: str) -> FlureeImage:
    attrs = getattr(image, "attrs", {}) or {}
    created = _parse_created(attrs.get("Created"))
    return FlureeImage(
        tag=Tag(name=tag_name, last_updated=created.isoformat()),
        id=getattr(image, "id", "") or attrs.get("Id", ""),
        created=created,
        size=int(attrs.get("Size") or 0),
        repository=repository,
    )


def _parse_created(value: Any) -> datetime:
    """Inspect отдаёт RFC3339-строку, список образов отдаёт unix time."""

    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, UTC)
    if isinstance(value, str) and value:
        try:
            return parse_timestamp(value)
        except ValueError:
            LOGGER.debug("Unparsable image creation time %r", value)
    return datetime.now(UTC)
