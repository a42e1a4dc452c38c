"""Пункты меню действий над контейнерами и леджерами."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, TypeVar

ActionT = TypeVar("ActionT", bound="MenuAction")


class MenuAction(Enum):
    """Меню, где значение элемента совпадает с подписью пункта."""

    @classmethod
    def variants(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def from_index(cls: type[ActionT], index: int) -> Optional[ActionT]:
        members = list(cls)
        if 0 <= index < len(members):
            return members[index]
        return None


class RunningContainerAction(MenuAction):
    VIEW_STATS = "View Container Stats"
    VIEW_LOGS = "View Container Logs"
    LIST_LEDGERS = "List Ledgers"
    STOP = "Stop Container"
    STOP_AND_DESTROY = "Stop and Destroy Container"
    GO_BACK = "Go Back to Container List"


class StoppedContainerAction(MenuAction):
    START = "Start this container"
    DESTROY = "Destroy this container"
    GO_BACK = "Go Back to Container List"


class LedgerAction(MenuAction):
    VIEW_DETAILS = "See More Details"
    DELETE = "Delete Ledger"
    RETURN = "Return to Ledger List"
    GO_BACK = "Go Back to Container Menu"
