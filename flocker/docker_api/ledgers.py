"""Работа с леджерами Fluree внутри контейнера через ``docker exec``.

Каждый леджер хранит в каталоге данных ns-файл (JSON с ``ledgerAlias``);
каталоги ``commit`` содержат сами коммиты и при поиске пропускаются.
"""

from __future__ import annotations

import json
import logging
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence

from docker.errors import DockerException

from flocker.docker_api.client import DockerClientWrapper
from flocker.docker_api.containers import get_container
from flocker.docker_api.exceptions import DockerAPIError
from flocker.docker_api.models import FLUREE_DATA_PATH, LedgerInfo

LOGGER = logging.getLogger(__name__)


def exec_command(
    client: DockerClientWrapper,
    container_id: str,
    command: Sequence[str],
    *,
    check: bool = False,
) -> str:
    """Выполняет команду в контейнере и возвращает её вывод (stdout и stderr)."""

    container = get_container(client, container_id)
    try:
        exit_code, output = container.exec_run(list(command), stdout=True, stderr=True)
    except DockerException as exc:
        raise DockerAPIError(
            f"Failed to exec in container: {exc}",
            context={"container_id": container_id, "command": list(command)},
        ) from exc
    text = output.decode("utf-8", errors="replace") if isinstance(output, bytes) else str(output or "")
    if check and exit_code not in (0, None):
        raise DockerAPIError(
            f"Command {' '.join(command)} exited with code {exit_code}: {text.strip()}",
            context={"container_id": container_id, "exit_code": exit_code},
        )
    return text


def list_ledgers(
    client: DockerClientWrapper, container_id: str, *, data_path: str = FLUREE_DATA_PATH
) -> List[LedgerInfo]:
    """Находит ns-файлы леджеров в каталоге данных и читает из них сводку."""

    listing = exec_command(
        client,
        container_id,
        ["find", data_path, "-type", "f", "-name", "*.json", "-not", "-path", "*/commit/*"],
    )
    ledgers: List[LedgerInfo] = []
    for line in listing.splitlines():
        path = line.strip()
        if not path:
            continue
        content = exec_command(client, container_id, ["cat", path])
        try:
            document = json.loads(content)
        except ValueError:
            LOGGER.debug("Skipping non-JSON file %s in %s", path, container_id)
            continue
        ledger = _parse_ledger(document, path)
        if ledger is not None:
            ledgers.append(ledger)
    LOGGER.debug("Found %d ledgers in container %s", len(ledgers), container_id)
    return ledgers


def get_ledger_details(client: DockerClientWrapper, container_id: str, path: str) -> str:
    """Возвращает ns-файл леджера в виде отформатированного JSON."""

    content = exec_command(client, container_id, ["cat", path])
    try:
        document = json.loads(content)
    except ValueError as exc:
        raise DockerAPIError(
            f"Failed to parse JSON: {exc}", context={"container_id": container_id, "path": path}
        ) from exc
    return json.dumps(document, indent=2, ensure_ascii=False)


def delete_ledger(client: DockerClientWrapper, container_id: str, path: str) -> None:
    """Удаляет каталог леджера вместе со всеми данными."""

    directory = PurePosixPath(path).parent
    if str(directory) in ("", ".", "/"):
        raise DockerAPIError("Invalid ledger path", context={"path": path})
    exec_command(client, container_id, ["rm", "-rf", str(directory)], check=True)
    LOGGER.info("Ledger directory %s deleted in container %s", directory, container_id)


def _parse_ledger(document: Any, path: str) -> Optional[LedgerInfo]:
    if not isinstance(document, dict):
        return None
    alias = document.get("ledgerAlias")
    if not isinstance(alias, str):
        return None

    branches = document.get("branches") or [{}]
    branch = branches[0] if isinstance(branches, list) and branches else {}
    commit: Dict[str, Any] = (branch.get("commit") if isinstance(branch, dict) else None) or {}
    data: Dict[str, Any] = commit.get("data") or {}
    index: Dict[str, Any] = (commit.get("index") or {}).get("data") or {}
    return LedgerInfo(
        alias=alias,
        last_commit_time=str(commit.get("time") or "unknown"),
        commit_count=_as_int(data.get("t")) or 0,
        size=_as_int(data.get("size")) or 0,
        path=path,
        flakes_count=_as_int(data.get("flakes")) or 0,
        last_index=_as_int(index.get("t")),
    )


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
