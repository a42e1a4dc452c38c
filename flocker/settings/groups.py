"""Классы групп настроек с полной поддержкой валидации."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from flocker.settings.exceptions import SettingsNotFoundError, SettingsValidationError
from flocker.settings.validators import (
    NON_EMPTY_STRING_VALIDATOR,
    CompositeValidator,
    EnumValidator,
    RangeValidator,
    RegexValidator,
    TypeValidator,
    Validator,
)

REPOSITORY_PATTERN = r"^[a-z0-9]+(?:[._-][a-z0-9]+)*(?:/[a-z0-9]+(?:[._-][a-z0-9]+)*)*$"
URL_PATTERN = r"^https?://\S+$"


def _int_range(min_value: int, max_value: int) -> Validator:
    return CompositeValidator([TypeValidator(int), RangeValidator(min_value, max_value)])


class SettingsGroup(ABC):
    """Абстрактная база для конкретных групп настроек."""

    group_name: str = ""

    def __init__(self) -> None:
        self._defaults: Dict[str, Any] = {}
        self._validators: Dict[str, Validator] = {}
        self._values: Dict[str, Any] = {}
        self._initialize_defaults()
        self._setup_validators()
        self.reset_to_defaults()

    @abstractmethod
    def _initialize_defaults(self) -> None:
        """Задаёт значения по умолчанию для группы."""

    @abstractmethod
    def _setup_validators(self) -> None:
        """Привязывает валидаторы к ключам группы."""

    def keys(self) -> Tuple[str, ...]:
        """Возвращает доступные ключи группы."""

        return tuple(self._defaults.keys())

    def get(self, key: str, default: Any = None) -> Any:
        """Возвращает значение настройки."""

        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        return self._values.get(key, default)

    def validate(self, key: str, value: Any) -> Tuple[bool, str]:
        """Применяет соответствующий валидатор и возвращает результат."""

        validator = self._validators.get(key)
        if not validator:
            return True, ""
        return validator.validate(value)

    def set(self, key: str, value: Any) -> None:
        """Сохраняет значение, выбрасывая ошибку при невалидных данных."""

        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        is_valid, error = self.validate(key, value)
        if not is_valid:
            raise SettingsValidationError(
                key=f"{self.group_name}.{key}",
                value=value,
                reason=error,
            )
        self._values[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Возвращает копию всех значений."""

        return dict(self._values)

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Заполняет значениями из словаря (использует set для валидации)."""

        for key, value in data.items():
            if key in self._defaults:
                self.set(key, value)

    def reset_to_defaults(self) -> None:
        """Сбрасывает значения группы к дефолтным."""

        self._values = dict(self._defaults)


class LoggingSettings(SettingsGroup):
    """Настройки логирования приложения."""

    group_name = "logging"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "enabled": True,
            "level": "INFO",
            "max_file_size_mb": 10,
            "max_archived_files": 5,
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "enabled": TypeValidator(bool),
            "level": EnumValidator(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
            "max_file_size_mb": _int_range(1, 100),
            "max_archived_files": _int_range(0, 50),
        }


class DockerSettings(SettingsGroup):
    """Параметры подключения к Docker и запуска контейнеров Fluree."""

    group_name = "docker"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "base_url": "",
            "image_repository": "fluree/server",
            "container_port": 8090,
            "data_path": "/opt/fluree-server/data",
            "logs_tail": 1000,
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "base_url": TypeValidator(str),
            "image_repository": CompositeValidator(
                [TypeValidator(str), RegexValidator(REPOSITORY_PATTERN)]
            ),
            "container_port": CompositeValidator([TypeValidator(int), RangeValidator(1, 65535)]),
            "data_path": CompositeValidator([NON_EMPTY_STRING_VALIDATOR, RegexValidator(r"^/.*")]),
            "logs_tail": _int_range(1, 100000),
        }


class HubSettings(SettingsGroup):
    """Настройки обращения к Docker Hub за списком тегов."""

    group_name = "hub"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "tags_url": "https://hub.docker.com/v2/repositories/fluree/server/tags",
            "page_size": 100,
            "timeout_sec": 10,
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "tags_url": CompositeValidator([TypeValidator(str), RegexValidator(URL_PATTERN)]),
            "page_size": _int_range(1, 100),
            "timeout_sec": _int_range(1, 120),
        }

