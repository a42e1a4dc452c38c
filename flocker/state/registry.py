"""Постоянный реестр контейнеров, созданных Flocker (config.json).

Реестр хранит историю намерений пользователя, а не живое состояние Docker:
контейнер могли удалить в обход Flocker, поэтому фактический статус всегда
запрашивается у Docker заново. Каждая изменяющая операция сразу сохраняет
файл целиком; если запись не удалась, изменение в памяти откатывается.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from flocker.state.exceptions import (
    ContainerNotFoundError,
    NameConflictError,
    PersistenceError,
    RecordValidationError,
    StateError,
)
from flocker.state.models import DEFAULT_PORT, ContainerRecord, DataDirConfig
from flocker.utils.helpers import parse_timestamp

LOGGER = logging.getLogger(__name__)


class ContainerRegistry:
    """Единственный источник правды о контейнерах, созданных этим инструментом."""

    def __init__(self, config_path: Path) -> None:
        self._file_path = config_path
        self._containers: Dict[str, ContainerRecord] = {}
        self._metadata: Dict[str, Any] = {}

    @property
    def config_path(self) -> Path:
        """Путь к файлу состояния."""

        return self._file_path

    def __len__(self) -> int:
        return len(self._containers)

    def __contains__(self, container_id: object) -> bool:
        return container_id in self._containers

    # ------------------------------------------------------------- persistence --
    @classmethod
    def load(cls, config_path: Path) -> "ContainerRegistry":
        """Читает config.json; отсутствие файла даёт пустой реестр."""

        registry = cls(config_path)
        if not config_path.exists():
            LOGGER.debug("No state file at %s, starting with an empty registry", config_path)
            return registry

        try:
            content = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PersistenceError(config_path, f"cannot read state: {exc}") from exc
        if not isinstance(content, dict):
            raise PersistenceError(config_path, "top-level JSON value must be an object")

        entries = content.get("containers", {})
        if not isinstance(entries, dict):
            raise PersistenceError(config_path, "'containers' must be an object")

        loaded: Dict[str, ContainerRecord] = {}
        owners: Dict[str, str] = {}
        for key, entry in entries.items():
            if not isinstance(entry, dict):
                raise PersistenceError(config_path, f"container entry '{key}' must be an object")
            if "id" in entry and entry["id"] != key:
                raise PersistenceError(
                    config_path, f"container entry '{key}' has mismatching id {entry['id']!r}"
                )
            try:
                record = ContainerRecord.from_dict({**entry, "id": key})
            except StateError as exc:
                raise PersistenceError(config_path, f"invalid container '{key}': {exc}") from exc
            if record.name in owners:
                raise PersistenceError(
                    config_path,
                    f"duplicate container name '{record.name}' in '{owners[record.name]}' and '{key}'",
                )
            owners[record.name] = key
            loaded[key] = record

        registry._containers = loaded
        registry._metadata = {k: v for k, v in content.items() if k != "containers"}
        LOGGER.debug("Loaded %d containers from %s", len(loaded), config_path)
        return registry

    def save(self) -> None:
        """Записывает реестр целиком: временный файл, затем атомарная замена."""

        payload = dict(self._metadata)
        payload["containers"] = {
            container_id: record.to_dict() for container_id, record in self._containers.items()
        }
        target = self._file_path
        tmp_name: Optional[str] = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                json.dump(payload, handle, indent=2, ensure_ascii=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
            tmp_name = None
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(target, f"cannot write state: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        LOGGER.debug("Saved %d containers to %s", len(self._containers), target)

    def reset(self) -> None:
        """Явный сброс: очищает реестр и удаляет файл состояния."""

        try:
            self._file_path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(self._file_path, f"cannot delete state: {exc}") from exc
        self._containers = {}
        self._metadata = {}
        LOGGER.info("State reset: %s", self._file_path)

    # ------------------------------------------------------------------ CRUD --
    def add_container(self, record: ContainerRecord) -> None:
        """Добавляет запись; имя должно быть уникальным среди всех записей."""

        for existing in self._containers.values():
            if existing.name == record.name and existing.id != record.id:
                raise NameConflictError(record.name, existing.id)

        previous = self._containers.get(record.id)

        def rollback() -> None:
            if previous is None:
                self._containers.pop(record.id, None)
            else:
                self._containers[record.id] = previous

        self._containers[record.id] = record
        self._commit(rollback)
        LOGGER.info(
            "Container registered: id=%s name=%s port=%s image=%s",
            record.id,
            record.name,
            record.port,
            record.image_tag,
        )

    def remove_container(self, container_id: str) -> None:
        """Удаляет запись по идентификатору."""

        if container_id not in self._containers:
            raise ContainerNotFoundError(container_id)
        snapshot = dict(self._containers)
        removed = self._containers.pop(container_id)

        def rollback() -> None:
            self._containers = snapshot

        self._commit(rollback)
        LOGGER.info("Container unregistered: id=%s name=%s", container_id, removed.name)

    def update_start_time(self, container_id: str, timestamp: str) -> None:
        """Обновляет last_start контейнера; метка должна быть в формате RFC3339."""

        record = self._containers.get(container_id)
        if record is None:
            raise ContainerNotFoundError(container_id)
        try:
            parse_timestamp(timestamp)
        except (AttributeError, ValueError) as exc:
            raise RecordValidationError("last_start", timestamp, "not an RFC3339 timestamp") from exc
        previous = record.last_start

        def rollback() -> None:
            record.last_start = previous

        record.last_start = timestamp
        self._commit(rollback)
        LOGGER.debug("Container %s last_start -> %s", container_id, timestamp)

    # ---------------------------------------------------------------- queries --
    def get_container(self, container_id: str) -> Optional[ContainerRecord]:
        return self._containers.get(container_id)

    def list_containers(self) -> List[ContainerRecord]:
        """Записи от последних запущенных к старым; без last_start в конце."""

        records = list(self._containers.values())
        started = [(record, record.started_at()) for record in records]
        with_time = [item for item in started if item[1] is not None]
        without_time = [record for record, moment in started if moment is None]
        # sorted() стабилен, при равных метках сохраняется порядок вставки
        with_time.sort(key=lambda item: item[1], reverse=True)
        return [record for record, _ in with_time] + without_time

    def find_by_name(self, substring: str) -> List[ContainerRecord]:
        """Поиск по вхождению подстроки в имя (с учётом регистра)."""

        return [record for record in self.list_containers() if substring in record.name]

    def name_in_use(self, name: str) -> bool:
        return any(record.name == name for record in self._containers.values())

    def default_settings(self) -> Tuple[int, Optional[DataDirConfig]]:
        """Порт и каталог данных последнего запущенного контейнера."""

        latest = self._latest()
        if latest is None:
            return DEFAULT_PORT, None
        return latest.port, latest.data_dir

    def default_detached(self) -> bool:
        latest = self._latest()
        return True if latest is None else latest.detached

    # ----------------------------------------------------------------- helpers --
    def _latest(self) -> Optional[ContainerRecord]:
        records = self.list_containers()
        return records[0] if records else None

    def _commit(self, rollback: Callable[[], None]) -> None:
        try:
            self.save()
        except PersistenceError:
            rollback()
            raise
