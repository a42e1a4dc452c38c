"""Исключения слоя работы с Docker."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)


class DockerAPIError(Exception):
    """Любая ошибка Docker SDK или демона, приведённая к одному типу."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        LOGGER.error("%s | context=%s", message, self.context)
