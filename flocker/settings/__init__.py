"""Настройки приложения Flocker (settings.json)."""

from .exceptions import SettingsError, SettingsIOError, SettingsNotFoundError, SettingsValidationError
from .registry import SettingsRegistry

__all__ = [
    "SettingsError",
    "SettingsIOError",
    "SettingsNotFoundError",
    "SettingsRegistry",
    "SettingsValidationError",
]
