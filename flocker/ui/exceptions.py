"""Исключения интерактивного интерфейса."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)


class UserInputError(Exception):
    """Пользователь прервал ввод (Ctrl-C, Esc) или ответов больше нет."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        LOGGER.warning("%s | context=%s", message, self.context)
