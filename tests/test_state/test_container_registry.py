"""Тесты постоянного реестра контейнеров."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from flocker.state.exceptions import (
    ContainerNotFoundError,
    NameConflictError,
    PersistenceError,
    RecordValidationError,
)
from flocker.state.models import ContainerRecord, DataDirConfig
from flocker.state.registry import ContainerRegistry


def make_record(
    container_id: str,
    name: str,
    *,
    port: int = 8090,
    last_start: str | None = None,
    data_dir: DataDirConfig | None = None,
    detached: bool = True,
) -> ContainerRecord:
    return ContainerRecord(
        id=container_id,
        name=name,
        port=port,
        data_dir=data_dir,
        image_tag="fluree/server:latest",
        last_start=last_start,
        detached=detached,
    )


def write_entries(config_path: Path, entries: dict) -> None:
    config_path.parent.mkdir(parents=True)
    config_path.write_text(json.dumps({"containers": entries}), encoding="utf-8")


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "flocker" / "config.json"


@pytest.fixture
def registry(config_path: Path) -> ContainerRegistry:
    return ContainerRegistry.load(config_path)


class TestLoadAndSave:
    """Чтение и запись config.json."""

    def test_missing_file_gives_empty_registry(self, config_path: Path) -> None:
        registry = ContainerRegistry.load(config_path)
        assert len(registry) == 0
        assert registry.list_containers() == []
        assert not config_path.exists()

    def test_add_creates_parent_directory_and_file(
        self, registry: ContainerRegistry, config_path: Path
    ) -> None:
        registry.add_container(make_record("a", "alpha", last_start="2024-01-01T00:00:00Z"))
        content = json.loads(config_path.read_text(encoding="utf-8"))
        assert content["containers"]["a"]["name"] == "alpha"
        assert content["containers"]["a"]["data_dir"] is None

    def test_roundtrip_preserves_records(self, registry: ContainerRegistry, config_path: Path) -> None:
        registry.add_container(
            make_record(
                "a",
                "alpha",
                port=9001,
                last_start="2024-01-01T00:00:00Z",
                data_dir=DataDirConfig(absolute_path="/data", relative_path="./data"),
                detached=False,
            )
        )
        registry.add_container(make_record("b", "beta", last_start=None))

        reloaded = ContainerRegistry.load(config_path)
        assert reloaded.list_containers() == registry.list_containers()
        assert reloaded.get_container("a") == registry.get_container("a")

    def test_two_loads_are_equal(self, registry: ContainerRegistry, config_path: Path) -> None:
        registry.add_container(make_record("a", "alpha"))
        first = ContainerRegistry.load(config_path)
        second = ContainerRegistry.load(config_path)
        assert first.list_containers() == second.list_containers()

    def test_unknown_top_level_keys_survive_save(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(
            json.dumps({"containers": {}, "note": "kept"}), encoding="utf-8"
        )
        registry = ContainerRegistry.load(config_path)
        registry.add_container(make_record("a", "alpha"))
        content = json.loads(config_path.read_text(encoding="utf-8"))
        assert content["note"] == "kept"

    def test_record_key_supplies_missing_id(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(
            json.dumps(
                {
                    "containers": {
                        "abc": {
                            "name": "alpha",
                            "port": 8090,
                            "data_dir": None,
                            "image_tag": "fluree/server:latest",
                            "last_start": None,
                        }
                    }
                }
            ),
            encoding="utf-8",
        )
        registry = ContainerRegistry.load(config_path)
        record = registry.get_container("abc")
        assert record is not None
        assert record.id == "abc"
        assert record.detached is True

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            "[]",
            json.dumps({"containers": []}),
            json.dumps({"containers": {"a": "oops"}}),
            json.dumps(
                {"containers": {"a": {"id": "a", "name": "alpha", "port": 80, "image_tag": "x"}}}
            ),
            json.dumps(
                {
                    "containers": {
                        "a": {
                            "name": "alpha",
                            "port": 8090,
                            "image_tag": "fluree/server:latest",
                            "last_start": 1704067200,
                        }
                    }
                }
            ),
        ],
    )
    def test_corrupt_file_raises_persistence_error(self, config_path: Path, content: str) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(content, encoding="utf-8")
        with pytest.raises(PersistenceError) as exc_info:
            ContainerRegistry.load(config_path)
        assert exc_info.value.path == config_path

    def test_duplicate_names_in_file_rejected(self, config_path: Path) -> None:
        write_entries(
            config_path,
            {
                "a": {"name": "dup", "port": 8090, "image_tag": "fluree/server:latest"},
                "b": {"name": "dup", "port": 8091, "image_tag": "fluree/server:latest"},
            },
        )
        with pytest.raises(PersistenceError) as exc_info:
            ContainerRegistry.load(config_path)
        assert "duplicate container name 'dup'" in str(exc_info.value)

    def test_entry_id_must_match_key(self, config_path: Path) -> None:
        write_entries(
            config_path,
            {
                "a": {"id": "b", "name": "one", "port": 8090, "image_tag": "fluree/server:latest"},
                "b": {"id": "b", "name": "two", "port": 8091, "image_tag": "fluree/server:latest"},
            },
        )
        with pytest.raises(PersistenceError) as exc_info:
            ContainerRegistry.load(config_path)
        assert "mismatching id" in str(exc_info.value)
        # файл остаётся нетронутым
        assert set(json.loads(config_path.read_text(encoding="utf-8"))["containers"]) == {"a", "b"}

    def test_save_failure_leaves_no_temp_files(
        self, registry: ContainerRegistry, config_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        registry.add_container(make_record("a", "alpha"))

        def broken_replace(src: str, dst: str) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(PersistenceError):
            registry.save()
        leftovers = [path.name for path in config_path.parent.iterdir()]
        assert leftovers == ["config.json"]

    def test_reset_deletes_file(self, registry: ContainerRegistry, config_path: Path) -> None:
        registry.add_container(make_record("a", "alpha"))
        registry.reset()
        assert len(registry) == 0
        assert not config_path.exists()
        assert len(ContainerRegistry.load(config_path)) == 0

    def test_reset_without_file(self, registry: ContainerRegistry) -> None:
        registry.reset()
        assert len(registry) == 0


class TestMutations:
    """Добавление, удаление и обновление записей."""

    def test_add_and_get(self, registry: ContainerRegistry) -> None:
        record = make_record("a", "alpha")
        registry.add_container(record)
        assert registry.get_container("a") == record
        assert "a" in registry
        assert registry.get_container("missing") is None

    def test_duplicate_name_rejected(self, registry: ContainerRegistry, config_path: Path) -> None:
        registry.add_container(make_record("a", "alpha"))
        with pytest.raises(NameConflictError) as exc_info:
            registry.add_container(make_record("b", "alpha"))
        assert exc_info.value.existing_id == "a"
        assert "b" not in registry
        assert "b" not in json.loads(config_path.read_text(encoding="utf-8"))["containers"]

    def test_names_are_case_sensitive(self, registry: ContainerRegistry) -> None:
        registry.add_container(make_record("a", "alpha"))
        registry.add_container(make_record("b", "Alpha"))
        assert len(registry) == 2

    def test_readding_same_id_replaces(self, registry: ContainerRegistry) -> None:
        registry.add_container(make_record("a", "alpha", port=9000))
        registry.add_container(make_record("a", "alpha", port=9001))
        assert len(registry) == 1
        record = registry.get_container("a")
        assert record is not None and record.port == 9001

    def test_remove(self, registry: ContainerRegistry, config_path: Path) -> None:
        registry.add_container(make_record("a", "alpha"))
        registry.remove_container("a")
        assert "a" not in registry
        assert ContainerRegistry.load(config_path).get_container("a") is None

    def test_remove_unknown_raises(self, registry: ContainerRegistry) -> None:
        with pytest.raises(ContainerNotFoundError):
            registry.remove_container("nope")

    def test_second_remove_fails_and_keeps_others(
        self, registry: ContainerRegistry, config_path: Path
    ) -> None:
        registry.add_container(make_record("a", "alpha"))
        registry.add_container(make_record("b", "beta"))
        registry.remove_container("a")
        with pytest.raises(ContainerNotFoundError):
            registry.remove_container("a")
        assert [record.id for record in registry.list_containers()] == ["b"]
        reloaded = ContainerRegistry.load(config_path)
        assert reloaded.get_container("b") == registry.get_container("b")
        assert "a" not in reloaded

    @pytest.mark.parametrize("timestamp", ["garbage", "", "2024-13-01T00:00:00Z"])
    def test_update_start_time_rejects_bad_timestamp(
        self, registry: ContainerRegistry, config_path: Path, timestamp: str
    ) -> None:
        registry.add_container(make_record("a", "alpha", last_start="2024-01-01T00:00:00Z"))
        with pytest.raises(RecordValidationError):
            registry.update_start_time("a", timestamp)
        reloaded = ContainerRegistry.load(config_path).get_container("a")
        assert reloaded is not None and reloaded.last_start == "2024-01-01T00:00:00Z"

    def test_update_start_time(self, registry: ContainerRegistry, config_path: Path) -> None:
        registry.add_container(make_record("a", "alpha", last_start=None))
        registry.update_start_time("a", "2024-06-01T12:00:00Z")
        reloaded = ContainerRegistry.load(config_path).get_container("a")
        assert reloaded is not None
        assert reloaded.last_start == "2024-06-01T12:00:00Z"

    def test_update_start_time_unknown_raises(self, registry: ContainerRegistry) -> None:
        with pytest.raises(ContainerNotFoundError):
            registry.update_start_time("nope", "2024-06-01T12:00:00Z")

    def test_failed_write_rolls_back_add(
        self, registry: ContainerRegistry, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken_save() -> None:
            raise PersistenceError(registry.config_path, "read-only")

        monkeypatch.setattr(registry, "save", broken_save)
        with pytest.raises(PersistenceError):
            registry.add_container(make_record("a", "alpha"))
        assert "a" not in registry

    def test_failed_write_rolls_back_remove_and_update(
        self, registry: ContainerRegistry, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        registry.add_container(make_record("a", "alpha", last_start="2024-01-01T00:00:00Z"))

        def broken_save() -> None:
            raise PersistenceError(registry.config_path, "read-only")

        monkeypatch.setattr(registry, "save", broken_save)
        with pytest.raises(PersistenceError):
            registry.remove_container("a")
        assert "a" in registry
        with pytest.raises(PersistenceError):
            registry.update_start_time("a", "2025-01-01T00:00:00Z")
        record = registry.get_container("a")
        assert record is not None and record.last_start == "2024-01-01T00:00:00Z"


class TestQueries:
    """Порядок записей и значения по умолчанию."""

    def test_list_sorted_by_last_start_desc(self, registry: ContainerRegistry) -> None:
        registry.add_container(make_record("old", "old", last_start="2023-01-01T00:00:00Z"))
        registry.add_container(make_record("never", "never", last_start=None))
        registry.add_container(make_record("new", "new", last_start="2024-01-01T00:00:00Z"))
        registry.add_container(make_record("never2", "never2", last_start=None))

        ids = [record.id for record in registry.list_containers()]
        assert ids == ["new", "old", "never", "never2"]

    def test_list_compares_instants_not_strings(self, registry: ContainerRegistry) -> None:
        registry.add_container(make_record("a", "a", last_start="2024-01-01T10:00:00+02:00"))
        registry.add_container(make_record("b", "b", last_start="2024-01-01T09:00:00Z"))
        assert [record.id for record in registry.list_containers()] == ["b", "a"]

    def test_list_handles_nanosecond_timestamps(self, registry: ContainerRegistry) -> None:
        registry.add_container(make_record("a", "a", last_start="2024-01-01T00:00:00.123456789Z"))
        registry.add_container(make_record("b", "b", last_start="2023-12-31T00:00:00Z"))
        assert [record.id for record in registry.list_containers()] == ["a", "b"]

    def test_find_by_name(self, registry: ContainerRegistry) -> None:
        registry.add_container(make_record("a", "ledger-dev", last_start="2023-01-01T00:00:00Z"))
        registry.add_container(make_record("b", "ledger-prod", last_start="2024-01-01T00:00:00Z"))
        registry.add_container(make_record("c", "other"))
        assert [record.id for record in registry.find_by_name("ledger")] == ["b", "a"]
        assert registry.find_by_name("Ledger") == []

    def test_name_in_use(self, registry: ContainerRegistry) -> None:
        registry.add_container(make_record("a", "alpha"))
        assert registry.name_in_use("alpha")
        assert not registry.name_in_use("alp")

    def test_default_settings_empty(self, registry: ContainerRegistry) -> None:
        assert registry.default_settings() == (8090, None)
        assert registry.default_detached() is True

    def test_default_settings_follow_latest_start(self, registry: ContainerRegistry) -> None:
        data_dir = DataDirConfig(absolute_path="/data/new", relative_path="./new")
        registry.add_container(make_record("a", "a", port=9000, last_start="2023-01-01T00:00:00Z"))
        registry.add_container(
            make_record(
                "b", "b", port=9100, last_start="2024-01-01T00:00:00Z", data_dir=data_dir, detached=False
            )
        )
        assert registry.default_settings() == (9100, data_dir)
        assert registry.default_detached() is False

        registry.update_start_time("a", "2025-01-01T00:00:00Z")
        assert registry.default_settings() == (9000, None)
