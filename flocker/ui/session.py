"""Интерактивная сессия Flocker.

Сессия показывает список известных контейнеров с их живым статусом,
ведёт пользователя по меню действий и проводит создание нового
контейнера. Реестр остаётся единственным местом, где хранится история;
Docker опрашивается заново при каждом показе списка.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from flocker.config import ConfigError, FlureeConfig
from flocker.docker_api.exceptions import DockerAPIError
from flocker.docker_api.gateway import DockerGateway
from flocker.docker_api.models import ContainerState, ContainerStatus, FlureeImage, LedgerInfo
from flocker.hub.api import HubClient
from flocker.hub.exceptions import HubAPIError
from flocker.settings.registry import SettingsRegistry
from flocker.state.exceptions import NameConflictError, PersistenceError
from flocker.state.models import ContainerRecord, DataDirConfig
from flocker.state.registry import ContainerRegistry
from flocker.ui.actions import LedgerAction, RunningContainerAction, StoppedContainerAction
from flocker.ui.interface import UserInterface
from flocker.ui.terminal import Column, TableFormatter, format_bytes, format_duration_since
from flocker.utils.helpers import parse_timestamp, relative_to_cwd, utc_timestamp

LOGGER = logging.getLogger(__name__)

CREATE_NEW_LABEL = "Create new container"
EXIT_LABEL = "Exit"
IMAGE_SOURCES = ("Remote (Docker Hub)", "Local")

CONTAINER_COLUMNS = (
    Column("Container", "name", 0.10),
    Column("Status", "status", 0.15),
    Column("Image", "image", 0.30),
    Column("Port", "port", 0.08),
    Column("Last Started", "last_start", 0.30),
)

LEDGER_COLUMNS = (
    Column("Ledger", "alias", 0.25),
    Column("Last commit", "last_commit", 0.20),
    Column("Commits", "commits", 0.10),
    Column("Last Indexed Commit", "last_index", 0.20),
    Column("Size", "size", 0.10),
    Column("Flakes", "flakes", 0.10),
)


class MenuChoice(Enum):
    """Чем закончился показ списка контейнеров."""

    CREATE = "create"
    EXIT = "exit"
    HANDLED = "handled"


class CliState:
    """Контроллер интерактивной сессии."""

    def __init__(
        self,
        registry: ContainerRegistry,
        gateway: DockerGateway,
        hub: HubClient,
        ui: UserInterface,
        settings: Optional[SettingsRegistry] = None,
        *,
        cwd: Optional[Path] = None,
    ) -> None:
        self._registry = registry
        self._gateway = gateway
        self._hub = hub
        self._ui = ui
        self._settings = settings
        self._cwd = cwd

    @property
    def registry(self) -> ContainerRegistry:
        return self._registry

    @property
    def current_dir(self) -> Path:
        return self._cwd or Path.cwd()

    # ------------------------------------------------------------------- state --
    @staticmethod
    def load_state(config_path: Path, ui: UserInterface) -> ContainerRegistry:
        """Читает реестр; испорченный файл не мешает работе, а даёт пустой реестр."""

        try:
            registry = ContainerRegistry.load(config_path)
        except PersistenceError as exc:
            ui.display_warning(f"Failed to load state\n{exc}")
            LOGGER.warning("Falling back to an empty registry: %s", exc)
            return ContainerRegistry(config_path)
        LOGGER.debug("State loaded: %d containers", len(registry))
        return registry

    # --------------------------------------------------------------- main loop --
    def run(self) -> None:
        """Список контейнеров по кругу, пока пользователь не выйдет или не создаст новый."""

        while True:
            choice = self.try_running_existing_container()
            if choice is MenuChoice.CREATE:
                self.create_container()
                return
            if choice is MenuChoice.EXIT:
                return

    def try_running_existing_container(self) -> MenuChoice:
        records = self._registry.list_containers()
        rows: List[Dict[str, Any]] = []
        for record in records:
            try:
                state = self._gateway.get_container_status(record.id).state
            except DockerAPIError:
                state = ContainerState.NOT_FOUND
            rows.append(
                {
                    "name": record.name,
                    "status": state.value,
                    "image": record.image_tag,
                    "port": record.port,
                    "last_start": _describe_last_start(record.last_start),
                }
            )

        table = TableFormatter(CONTAINER_COLUMNS)
        items = table.format_rows(rows) + [CREATE_NEW_LABEL, EXIT_LABEL]
        if rows:
            self._ui.display_info(f"  {table.format_header(rows)}")
        selection = self._ui.get_selection("Select a container or create a new one", items)

        if selection == len(records):
            return MenuChoice.CREATE
        if selection >= len(records):
            return MenuChoice.EXIT

        selected = records[selection]
        try:
            status = self._gateway.get_container_status(selected.id)
        except DockerAPIError as exc:
            self._ui.display_warning(f"Cannot query container {selected.name}: {exc}")
            return MenuChoice.HANDLED
        if status.state is ContainerState.NOT_FOUND:
            self._ui.display_warning(f"Container no longer exists: {selected.name}")
            self._registry.remove_container(selected.id)
            return MenuChoice.HANDLED

        self.handle_container(status)
        return MenuChoice.HANDLED

    # -------------------------------------------------------------- containers --
    def handle_container(self, status: ContainerStatus) -> None:
        if status.state is ContainerState.RUNNING:
            self._handle_running_container(status)
        elif status.state is ContainerState.STOPPED:
            self._handle_stopped_container(status)

    def _handle_running_container(self, status: ContainerStatus) -> None:
        self._ui.display_success(f"Found running Fluree container: {status.name}")
        self._ui.display_text(f"Container ID: {status.short_id}")
        self._ui.display_text(f"Mapped port: {status.port}")
        if status.data_dir:
            self._ui.display_text(f"Data directory: {status.data_dir}")

        while True:
            index = self._ui.get_selection(
                "What would you like to do?", RunningContainerAction.variants()
            )
            action = RunningContainerAction.from_index(index)
            if action is RunningContainerAction.VIEW_STATS:
                self._ui.display_text(self._gateway.fetch_stats(status.id))
            elif action is RunningContainerAction.VIEW_LOGS:
                self._ui.page(self._gateway.fetch_logs(status.id, self._logs_tail()))
            elif action is RunningContainerAction.LIST_LEDGERS:
                self.handle_ledger_management(status.id)
            elif action is RunningContainerAction.STOP:
                self._gateway.stop_container(status.id)
                self._ui.display_success("Container stopped successfully")
                return
            elif action is RunningContainerAction.STOP_AND_DESTROY:
                self._destroy(status.id)
                return
            else:
                return

    def _handle_stopped_container(self, status: ContainerStatus) -> None:
        self._ui.display_warning(f"Found stopped container: {status.name} ({status.short_id})")
        if status.started_at:
            self._ui.display_text(f"Last started: {_describe_last_start(status.started_at)}")

        index = self._ui.get_selection("What would you like to do?", StoppedContainerAction.variants())
        action = StoppedContainerAction.from_index(index)
        if action is StoppedContainerAction.START:
            self._gateway.start_container(status.id)
            if status.id in self._registry:
                self._registry.update_start_time(status.id, utc_timestamp())
            self._ui.display_success("Container started successfully")
        elif action is StoppedContainerAction.DESTROY:
            self._destroy(status.id)

    def _destroy(self, container_id: str) -> None:
        # запись удаляется только после того, как Docker удалил контейнер
        self._gateway.remove_container(container_id)
        if container_id in self._registry:
            self._registry.remove_container(container_id)
        self._ui.display_success("Container removed successfully")

    # ----------------------------------------------------------------- ledgers --
    def handle_ledger_management(self, container_id: str) -> None:
        while True:
            ledgers = sorted(
                self._gateway.list_ledgers(container_id), key=_commit_moment, reverse=True
            )
            if not ledgers:
                self._ui.display_warning("No ledgers found")
                return

            rows = [_ledger_row(ledger) for ledger in ledgers]
            table = TableFormatter(LEDGER_COLUMNS)
            self._ui.display_info(f"  {table.format_header(rows)}")
            items = table.format_rows(rows) + [LedgerAction.GO_BACK.value]
            selection = self._ui.get_selection("Select a ledger", items)
            if selection >= len(ledgers):
                return
            ledger = ledgers[selection]

            index = self._ui.get_selection("What would you like to do?", LedgerAction.variants())
            action = LedgerAction.from_index(index)
            if action is LedgerAction.VIEW_DETAILS:
                details = self._gateway.get_ledger_details(container_id, ledger.path)
                self._ui.display_info("Ledger Details:")
                self._ui.display_text(details)
            elif action is LedgerAction.DELETE:
                self._delete_ledger(container_id, ledger)
            elif action is LedgerAction.GO_BACK:
                return

    def _delete_ledger(self, container_id: str, ledger: LedgerInfo) -> None:
        self._ui.display_error(
            "WARNING: This will permanently delete the ledger and all its data!"
        )
        self._ui.get_string_input(
            "Type 'delete' to confirm",
            validate=lambda value: value == "delete" or "Type 'delete' to confirm",
        )
        self._gateway.delete_ledger(container_id, ledger.path)
        self._ui.display_success(f"Ledger {ledger.alias} deleted successfully")

    # ----------------------------------------------------------------- create --
    def get_config(self) -> Tuple[FlureeImage, FlureeConfig, str, bool]:
        image = self._select_image()
        name = self._ui.get_string_input(
            "Enter a name for this container", validate=self._validate_name
        ).strip()
        host_port = self._get_port()
        data_mount = self._get_data_mount()
        detached = self._ui.get_bool_input(
            "Run the container in the background (detached)?",
            self._registry.default_detached(),
        )
        config = FlureeConfig(host_port=host_port, data_mount=data_mount)
        config.validate()
        return image, config, name, detached

    def create_container(self) -> Optional[ContainerRecord]:
        image, config, name, detached = self.get_config()
        container_id = self._gateway.create_and_start_container(
            image, config.into_container_config(), name
        )

        data_dir = None
        if config.data_mount is not None:
            data_dir = DataDirConfig(
                absolute_path=str(config.data_mount),
                relative_path=relative_to_cwd(config.data_mount, self.current_dir.resolve()),
            )
        record = ContainerRecord(
            id=container_id,
            name=name,
            port=config.host_port,
            data_dir=data_dir,
            image_tag=image.reference,
            detached=detached,
        )
        try:
            self._registry.add_container(record)
        except NameConflictError as exc:
            self._gateway.remove_container(container_id)
            self._ui.display_error(f"Container was not saved: {exc}")
            return None

        self.display_success(record)
        if not detached:
            self._follow_logs(container_id)
        return record

    def display_success(self, record: ContainerRecord) -> None:
        self._ui.display_success("Container started successfully!")
        self._ui.display_text(f"Container ID: {record.id[:12]}")
        self._ui.display_text(f"Mapped port: {record.port}")
        if record.data_dir is not None:
            self._ui.display_text(f"Data directory: {record.data_dir.absolute_path}")
        self._ui.display_text("\nFluree will be available at:")
        self._ui.display_info(f"http://localhost:{record.port}")
        if record.detached:
            self._ui.display_text("\nTo view logs:")
            self._ui.display_info(f"docker logs {record.id[:12]}")

    def _follow_logs(self, container_id: str) -> None:
        self._ui.display_info("Following container logs, press Ctrl-C to stop")
        try:
            for chunk in self._gateway.follow_logs(container_id):
                self._ui.display_text(chunk.rstrip("\n"))
        except KeyboardInterrupt:
            self._ui.display_info("Stopped following logs; the container keeps running")

    def _select_image(self) -> FlureeImage:
        source = self._ui.get_selection(
            "Do you want to list remote or local Fluree images?", IMAGE_SOURCES
        )
        if source == 1:
            image = self._select_local_image()
            if image is not None:
                return image
        return self._select_remote_image()

    def _select_remote_image(self) -> FlureeImage:
        self._ui.display_info("Fetching available images from Docker Hub...")
        tags = self._hub.fetch_tags()
        if not tags:
            raise HubAPIError("Docker Hub returned no tags")
        repository = self._repository()
        width = max(len(tag.name) for tag in tags)
        selection = self._ui.get_selection(
            "Select a Fluree image", [tag.pretty_print(repository, width) for tag in tags]
        )
        tag = tags[selection]

        self._ui.display_info(f"Pulling image {tag.reference(repository)}")
        self._gateway.pull_image(tag.name, on_progress=self._ui.display_text)
        self._ui.display_success(f"Successfully pulled {tag.reference(repository)}")
        return self._gateway.get_image_by_tag(tag.name)

    def _select_local_image(self) -> Optional[FlureeImage]:
        images = self._gateway.list_local_images()
        if not images:
            self._ui.display_warning(
                f"No local Fluree images found; pick one from Docker Hub instead "
                f"(or run: docker pull {self._repository()}:latest)"
            )
            return None
        width = max(len(image.tag.name) for image in images)
        selection = self._ui.get_selection(
            "Select a Fluree image",
            [image.tag.pretty_print(image.repository, width) for image in images],
        )
        return images[selection]

    def _get_port(self) -> int:
        default_port, _ = self._registry.default_settings()
        raw = self._ui.get_string_input(
            "Enter host port to map to container port 8090",
            default=str(default_port),
            validate=_validate_port,
        )
        return int(raw.strip())

    def _get_data_mount(self) -> Optional[Path]:
        if not self._ui.get_bool_input("Mount a local directory for data persistence?", True):
            return None

        current_dir = self.current_dir
        _, default_dir = self._registry.default_settings()
        if default_dir is None:
            default_dir = DataDirConfig.from_current_dir(current_dir)
        raw = self._ui.get_string_input(
            "Enter path to mount (will be created if it doesn't exist)",
            default=default_dir.display_relative_path(),
        ).strip()

        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = current_dir / candidate
        try:
            if not candidate.exists():
                candidate.mkdir(parents=True)
                self._ui.display_success(f"Created directory: {candidate}")
            resolved = DataDirConfig.from_user_path(raw, current_dir)
        except OSError as exc:
            raise ConfigError(
                f"Failed to prepare data directory {candidate}: {exc}",
                context={"path": str(candidate)},
            ) from exc
        return Path(resolved.absolute_path)

    def _validate_name(self, value: str) -> Union[bool, str]:
        name = value.strip()
        if not name:
            return "Container name must not be empty"
        if self._registry.name_in_use(name):
            return f"Container name '{name}' is already in use"
        return True

    def _repository(self) -> str:
        if self._settings is None:
            return "fluree/server"
        return str(self._settings.get_value("docker", "image_repository", default="fluree/server"))

    def _logs_tail(self) -> Optional[int]:
        if self._settings is None:
            return None
        return int(self._settings.get_value("docker", "logs_tail", default=1000))


def _validate_port(value: str) -> Union[bool, str]:
    try:
        port = int(value.strip())
    except ValueError:
        return "Port must be a number"
    if port < 1024:
        return "Port must be >= 1024"
    if port > 65535:
        return "Port must be <= 65535"
    return True


def _describe_last_start(value: Optional[str]) -> str:
    # Docker отдаёт нулевую дату для контейнеров, которые ни разу не запускались
    if not value or value.startswith("0001-01-01"):
        return "Never"
    try:
        return format_duration_since(value)
    except ValueError:
        LOGGER.debug("Failed to parse time: %s", value)
        return "Unknown"


def _commit_moment(ledger: LedgerInfo) -> datetime:
    try:
        return parse_timestamp(ledger.last_commit_time)
    except ValueError:
        return datetime.min.replace(tzinfo=UTC)


def _ledger_row(ledger: LedgerInfo) -> Dict[str, Any]:
    return {
        "alias": ledger.alias,
        "last_commit": _describe_last_start(ledger.last_commit_time),
        "commits": ledger.commit_count,
        "last_index": "None" if ledger.last_index is None else ledger.last_index,
        "size": format_bytes(ledger.size),
        "flakes": ledger.flakes_count,
    }
