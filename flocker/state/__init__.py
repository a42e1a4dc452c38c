"""Постоянное состояние Flocker: реестр созданных контейнеров."""

from .exceptions import (
    ContainerNotFoundError,
    NameConflictError,
    PersistenceError,
    RecordValidationError,
    StateError,
)
from .models import DEFAULT_PORT, ContainerRecord, DataDirConfig
from .registry import ContainerRegistry

__all__ = [
    "DEFAULT_PORT",
    "ContainerNotFoundError",
    "ContainerRecord",
    "ContainerRegistry",
    "DataDirConfig",
    "NameConflictError",
    "PersistenceError",
    "RecordValidationError",
    "StateError",
]
