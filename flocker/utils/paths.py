"""Централизованное описание путей приложения."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

# APP_DIR_NAME: имя каталога приложения внутри пользовательского конфига
APP_DIR_NAME = "flocker"
STATE_FILE_NAME = "config.json"
SETTINGS_FILE_NAME = "settings.json"


def resolve_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Возвращает каталог конфигурации с учётом переменных окружения."""

    env = os.environ if environ is None else environ
    override = env.get("FLOCKER_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    xdg_home = env.get("XDG_CONFIG_HOME")
    if xdg_home:
        return Path(xdg_home).expanduser() / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def state_file(config_dir: Path) -> Path:
    return config_dir / STATE_FILE_NAME


def settings_file(config_dir: Path) -> Path:
    return config_dir / SETTINGS_FILE_NAME
