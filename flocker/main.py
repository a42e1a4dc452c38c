"""Точка входа в приложение Flocker."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from flocker import __version__
from flocker.app import EXIT_FAILURE, create_application
from flocker.docker_api.exceptions import DockerAPIError
from flocker.docker_api.gateway import DockerManager
from flocker.hub.api import HubClient
from flocker.settings.exceptions import SettingsError
from flocker.settings.registry import SettingsRegistry
from flocker.state.exceptions import PersistenceError
from flocker.ui.interface import DefaultUI
from flocker.ui.session import CliState
from flocker.utils.logger import configure_logging
from flocker.utils.paths import resolve_config_dir, settings_file, state_file

LOGGER = logging.getLogger(__name__)


def initialize_settings(config_path: Path) -> SettingsRegistry:
    """Создаёт реестр настроек и загружает settings.json."""

    registry = SettingsRegistry(config_path=config_path)
    registry.load_from_disk()
    return registry


def setup_logging_from_settings(
    base_dir: Path, settings: SettingsRegistry, *, verbose: bool = False
) -> None:
    """Настраивает логирование в соответствии с LoggingSettings."""

    logging_settings = settings.get_group("logging")
    if not logging_settings.get("enabled") and not verbose:
        logging.disable(logging.CRITICAL)
        return

    logging.disable(logging.NOTSET)
    configure_logging(
        log_dir=base_dir / "logs",
        level_name="DEBUG" if verbose else logging_settings.get("level", "INFO"),
        max_bytes=logging_settings.get("max_file_size_mb", 10) * 1024 * 1024,
        backup_count=logging_settings.get("max_archived_files", 5),
        console=verbose,
    )


def main(verbose: bool = False, reset: bool = False, config_dir: Optional[Path] = None) -> int:
    """Основная точка входа: готовит окружение и запускает сессию."""

    base_dir = config_dir or resolve_config_dir()
    ui = DefaultUI()
    try:
        settings = initialize_settings(settings_file(base_dir))
    except SettingsError as exc:
        ui.display_error(f"Failed to load settings: {exc}")
        return EXIT_FAILURE
    setup_logging_from_settings(base_dir, settings, verbose=verbose)
    LOGGER.info("Запуск Flocker версии %s (config dir %s)", __version__, base_dir)

    try:
        gateway = DockerManager.connect(settings)
    except DockerAPIError as exc:
        ui.display_error(str(exc))
        return EXIT_FAILURE

    registry = CliState.load_state(state_file(base_dir), ui)
    if reset:
        try:
            registry.reset()
        except PersistenceError as exc:
            ui.display_error(str(exc))
            return EXIT_FAILURE
        ui.display_success("Container registry has been reset")

    app = create_application(
        registry=registry,
        gateway=gateway,
        hub=HubClient.from_settings(settings),
        ui=ui,
        settings=settings,
    )
    exit_code = app.run()
    LOGGER.info("Flocker finished with exit code %s", exit_code)
    return exit_code


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output (debug logging to stderr)")
@click.option("--reset", is_flag=True, help="Forget all containers remembered by Flocker")
@click.version_option(version=__version__, prog_name="flocker")
def cli(verbose: bool, reset: bool) -> None:
    """Interactive manager for Fluree Docker containers."""

    sys.exit(main(verbose=verbose, reset=reset))


if __name__ == "__main__":
    cli()
