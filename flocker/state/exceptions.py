"""Пользовательские исключения реестра контейнеров."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)


class StateError(Exception):
    """Базовое исключение для любых ошибок состояния с поддержкой контекста."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        """Сохраняет сообщение и контекст, логируя ошибку."""

        self.message = message
        self.context = context or {}
        super().__init__(message)
        LOGGER.error("%s | context=%s", message, self.context)


class PersistenceError(StateError):
    """Поднимается при ошибках чтения/записи или разбора config.json."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(
            f"I/O error with state file '{path}': {reason}",
            context={"path": str(path), "reason": reason},
        )


class NameConflictError(StateError):
    """Имя контейнера уже занято другой записью."""

    def __init__(self, name: str, existing_id: str) -> None:
        self.name = name
        self.existing_id = existing_id
        super().__init__(
            f"Container name '{name}' is already used by container {existing_id}",
            context={"name": name, "existing_id": existing_id},
        )


class ContainerNotFoundError(StateError):
    """Операция сослалась на неизвестный идентификатор контейнера."""

    def __init__(self, container_id: str) -> None:
        self.container_id = container_id
        super().__init__(
            f"Container '{container_id}' not found in state",
            context={"container_id": container_id},
        )


class RecordValidationError(StateError):
    """Сигнализирует о некорректных полях записи контейнера."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid container record field '{field}': {reason} (value={value!r})",
            context={"field": field, "value": value, "reason": reason},
        )
