"""Интерфейс взаимодействия с пользователем и его терминальная реализация."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Sequence, Union

import questionary
from questionary import Style
from rich.console import Console

from flocker.ui.exceptions import UserInputError

LOGGER = logging.getLogger(__name__)

# Validator возвращает True либо текст ошибки, как ожидает questionary
InputValidator = Callable[[str], Union[bool, str]]

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green bold"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green bold"),
        ("instruction", "fg:gray"),
    ]
)


class UserInterface(Protocol):
    """Всё, что сессии нужно от терминала: подсказки и сообщения."""

    def get_string_input(
        self, prompt: str, default: Optional[str] = None, validate: Optional[InputValidator] = None
    ) -> str: ...

    def get_bool_input(self, prompt: str, default: bool) -> bool: ...

    def get_selection(self, prompt: str, items: Sequence[str], default: int = 0) -> int: ...

    def display_success(self, message: str) -> None: ...

    def display_warning(self, message: str) -> None: ...

    def display_error(self, message: str) -> None: ...

    def display_info(self, message: str) -> None: ...

    def display_text(self, text: str) -> None: ...

    def page(self, text: str) -> None: ...


class DefaultUI:
    """Подсказки questionary и вывод через rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console()

    # ------------------------------------------------------------------ input --
    def get_string_input(
        self, prompt: str, default: Optional[str] = None, validate: Optional[InputValidator] = None
    ) -> str:
        question = questionary.text(
            prompt,
            default=default or "",
            validate=validate,
            style=PROMPT_STYLE,
        )
        return str(self._ask(question, prompt))

    def get_bool_input(self, prompt: str, default: bool) -> bool:
        question = questionary.confirm(prompt, default=default, style=PROMPT_STYLE)
        return bool(self._ask(question, prompt))

    def get_selection(self, prompt: str, items: Sequence[str], default: int = 0) -> int:
        if not items:
            raise UserInputError("Nothing to select", context={"prompt": prompt})
        choices = [questionary.Choice(title=item, value=index) for index, item in enumerate(items)]
        question = questionary.select(
            prompt,
            choices=choices,
            default=choices[default] if 0 <= default < len(choices) else None,
            style=PROMPT_STYLE,
        )
        return int(self._ask(question, prompt))

    @staticmethod
    def _ask(question: Any, prompt: str) -> Any:
        # ask() перехватывает Ctrl-C и возвращает None
        answer = question.ask()
        if answer is None:
            raise UserInputError("Input cancelled", context={"prompt": prompt})
        return answer

    # ----------------------------------------------------------------- output --
    def display_success(self, message: str) -> None:
        self._console.print(f"\n{message}", style="bold green", markup=False)

    def display_warning(self, message: str) -> None:
        self._console.print(f"\n{message}", style="bold yellow", markup=False)

    def display_error(self, message: str) -> None:
        self._console.print(f"\n{message}", style="bold red", markup=False)

    def display_info(self, message: str) -> None:
        self._console.print(message, style="cyan", markup=False)

    def display_text(self, text: str) -> None:
        self._console.print(text, markup=False, highlight=False)

    def page(self, text: str) -> None:
        with self._console.pager():
            self._console.print(text, markup=False, highlight=False)
