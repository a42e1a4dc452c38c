"""Интерактивный терминальный интерфейс Flocker."""

from .exceptions import UserInputError
from .interface import DefaultUI, UserInterface
from .scripted import ScriptedUI
from .session import CliState

__all__ = ["CliState", "DefaultUI", "ScriptedUI", "UserInputError", "UserInterface"]
