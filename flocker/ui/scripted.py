"""Сценарный интерфейс: заранее заданные ответы вместо терминала.

Используется в тестах сессии и для неинтерактивных прогонов. Ответы
берутся из очереди по порядку; каждое выведенное сообщение записывается.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from flocker.ui.exceptions import UserInputError
from flocker.ui.interface import InputValidator


class ScriptedUI:
    """Реализация ``UserInterface`` поверх очереди ответов."""

    def __init__(self, answers: Iterable[Any] = ()) -> None:
        self._answers = deque(answers)
        self.prompts: List[str] = []
        self.messages: List[Tuple[str, str]] = []

    def add_answers(self, *answers: Any) -> None:
        self._answers.extend(answers)

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def _next(self, prompt: str) -> Any:
        self.prompts.append(prompt)
        if not self._answers:
            raise UserInputError("No scripted answer left", context={"prompt": prompt})
        return self._answers.popleft()

    # ------------------------------------------------------------------ input --
    def get_string_input(
        self, prompt: str, default: Optional[str] = None, validate: Optional[InputValidator] = None
    ) -> str:
        while True:
            answer = self._next(prompt)
            # None означает «принять значение по умолчанию»
            value = default if answer is None else str(answer)
            if value is None:
                value = ""
            if validate is None:
                return value
            verdict = validate(value)
            if verdict is True:
                return value
            self.messages.append(("error", str(verdict)))

    def get_bool_input(self, prompt: str, default: bool) -> bool:
        answer = self._next(prompt)
        return default if answer is None else bool(answer)

    def get_selection(self, prompt: str, items: Sequence[str], default: int = 0) -> int:
        answer = self._next(prompt)
        if answer is None:
            return default
        if isinstance(answer, str):
            matches = [index for index, item in enumerate(items) if answer in item]
            if not matches:
                raise UserInputError(
                    f"Scripted choice {answer!r} not offered", context={"items": list(items)}
                )
            return matches[0]
        index = int(answer)
        if not 0 <= index < len(items):
            raise UserInputError(
                f"Scripted index {index} out of range", context={"items": list(items)}
            )
        return index

    # ----------------------------------------------------------------- output --
    def display_success(self, message: str) -> None:
        self.messages.append(("success", message))

    def display_warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def display_error(self, message: str) -> None:
        self.messages.append(("error", message))

    def display_info(self, message: str) -> None:
        self.messages.append(("info", message))

    def display_text(self, text: str) -> None:
        self.messages.append(("text", text))

    def page(self, text: str) -> None:
        self.messages.append(("page", text))

    def messages_of(self, kind: str) -> List[str]:
        return [message for level, message in self.messages if level == kind]
