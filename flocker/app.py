"""Высокоуровневые утилиты для создания и запуска терминального приложения Flocker."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from flocker.config import ConfigError
from flocker.docker_api.exceptions import DockerAPIError
from flocker.docker_api.gateway import DockerGateway
from flocker.hub.api import HubClient
from flocker.hub.exceptions import HubAPIError
from flocker.settings.registry import SettingsRegistry
from flocker.state.exceptions import StateError
from flocker.state.registry import ContainerRegistry
from flocker.ui.exceptions import UserInputError
from flocker.ui.interface import UserInterface
from flocker.ui.session import CliState

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
# 128 + SIGINT, как у оболочки при Ctrl-C
EXIT_INTERRUPTED = 130


class RunnableApp(Protocol):
    """Интерфейс приложения, которое можно запустить и получить код возврата."""

    def run(self) -> int:  # pragma: no cover - протокол
        """Запускает цикл приложения и возвращает код завершения."""


@dataclass
class TerminalApp:
    """Интерактивная сессия с переводом ошибок в коды завершения."""

    session: CliState
    ui: UserInterface

    def run(self) -> int:
        """Запускает сессию и возвращает код завершения."""

        try:
            self.session.run()
        except UserInputError:
            self.ui.display_warning("Cancelled")
            return EXIT_INTERRUPTED
        except KeyboardInterrupt:
            LOGGER.info("Interrupted by user")
            self.ui.display_warning("Cancelled")
            return EXIT_INTERRUPTED
        except (DockerAPIError, HubAPIError, StateError, ConfigError) as exc:
            self.ui.display_error(f"Error: {exc}")
            return EXIT_FAILURE
        return EXIT_OK


def create_application(
    registry: ContainerRegistry,
    gateway: DockerGateway,
    hub: HubClient,
    ui: UserInterface,
    settings: Optional[SettingsRegistry] = None,
) -> RunnableApp:
    """Фабрика терминального приложения."""

    session = CliState(registry, gateway, hub, ui, settings)
    return TerminalApp(session=session, ui=ui)
