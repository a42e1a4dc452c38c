"""Тесты перевода ошибок сессии в коды завершения."""

from __future__ import annotations

from pathlib import Path

import pytest

from flocker.app import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_OK, TerminalApp, create_application
from flocker.config import ConfigError
from flocker.docker_api.exceptions import DockerAPIError
from flocker.hub.exceptions import HubAPIError
from flocker.state.exceptions import PersistenceError
from flocker.state.registry import ContainerRegistry
from flocker.ui.exceptions import UserInputError
from flocker.ui.scripted import ScriptedUI


class FailingSession:
    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error

    def run(self) -> None:
        if self.error is not None:
            raise self.error


def test_normal_exit() -> None:
    ui = ScriptedUI()
    assert TerminalApp(FailingSession(), ui).run() == EXIT_OK  # type: ignore[arg-type]
    assert ui.messages == []


@pytest.mark.parametrize("error", [UserInputError("Input cancelled"), KeyboardInterrupt()])
def test_cancel_returns_130(error: BaseException) -> None:
    ui = ScriptedUI()
    assert TerminalApp(FailingSession(error), ui).run() == EXIT_INTERRUPTED  # type: ignore[arg-type]
    assert ui.messages_of("warning") == ["Cancelled"]


@pytest.mark.parametrize(
    "error",
    [
        DockerAPIError("daemon gone"),
        HubAPIError("hub down"),
        PersistenceError(Path("/tmp/config.json"), "read-only"),
        ConfigError("bad port"),
    ],
)
def test_failures_return_1(error: Exception) -> None:
    ui = ScriptedUI()
    assert TerminalApp(FailingSession(error), ui).run() == EXIT_FAILURE  # type: ignore[arg-type]
    assert ui.messages_of("error")[0].startswith("Error: ")


def test_create_application_runs_session(tmp_path: Path) -> None:
    ui = ScriptedUI(["Exit"])
    registry = ContainerRegistry.load(tmp_path / "config.json")
    app = create_application(registry, gateway=object(), hub=object(), ui=ui)  # type: ignore[arg-type]
    assert app.run() == EXIT_OK
    assert ui.remaining == 0
